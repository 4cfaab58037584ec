"""Realtime infrastructure (Socket.IO).

Notifications, leave decisions and payroll events share one socket server.
"""
