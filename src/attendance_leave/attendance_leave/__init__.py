"""Attendance & Leave package.

This package is organized by feature modules (attendance, leaves, resolution,
reports, ...) with a thin Flask JSON controller layer over service/repository
layers. Every read path goes through ``resolution.engine``.
"""
