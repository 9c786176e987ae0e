"""Clinic application for the ClinicFlow backend.

This package contains models, serializers, services, views and route
registrations for hospitals, appointments, queues, doctor leave and
attendance.
"""
