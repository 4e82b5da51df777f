"""Shift scheduling & attendance automation package.

Organized by feature modules (shifts, schedules, attendance, payroll, ...)
with a thin Flask controller layer on top of service/repository layers.
The scheduling core (recurrence expansion, override resolution, scope
propagation, auto-close decisions, rounding) is pure and takes an explicit
``OrgSettings`` instead of reading global configuration.
"""
