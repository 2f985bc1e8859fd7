"""Geo Attendance package.

Attendance check-in/check-out engine organized by feature modules (timing,
location, attendance, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
