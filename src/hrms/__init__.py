"""HRMS attendance & payroll backend.

This package is organized by feature modules (attendance, payroll, leaves, users)
with a thin Flask controller layer over service/repository layers.
"""
