import json

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.doctors import find_doctor, resolve_hospital
from clinic.services.queues import doctor_group, doctor_queue, hospital_group, hospital_queues


class QueueConsumer(AsyncWebsocketConsumer):
    """Push queue snapshots to waiting-room displays.

    Connect to ``ws/queue/hospital/<id>/`` or ``ws/queue/doctor/<id>/``.
    The current queue is sent on connect and again after every booking
    or status change broadcast to the matching group.
    """

    async def connect(self):
        kwargs = self.scope["url_route"]["kwargs"]
        self.scope_kind = "hospital" if "hospital_id" in kwargs else "doctor"
        ref = kwargs.get("hospital_id") or kwargs.get("doctor_id")

        if self.scope_kind == "hospital":
            self.target = await sync_to_async(resolve_hospital)(ref)
            self.ref = ref
            if self.target is None:
                await self.close(code=4004)
                return
            self.group_name = hospital_group(self.target.id)
        else:
            self.target = await sync_to_async(find_doctor)(ref)
            if self.target is None:
                await self.close(code=4004)
                return
            self.group_name = doctor_group(self.target.id)

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send_snapshot(event=None)

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def send_snapshot(self, event):
        if self.scope_kind == "hospital":
            data = await sync_to_async(hospital_queues)(self.ref, self.target)
        else:
            data = await sync_to_async(doctor_queue)(self.target)
        await self.send(json.dumps({"type": "queue.snapshot", "event": event, "data": data}))

    async def queue_update(self, event):
        # event: {"type": "queue.update", "event": "booked"|"status"|"updated", "appointmentId": ..., ...}
        await self.send_snapshot(event.get("event"))
