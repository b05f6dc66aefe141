"""ERP portal package.

Organized by feature modules (employees, attendance, payroll, tickets, ...)
with a thin Flask controller layer over service/repository layers.
"""
