"""HRIS package.

Feature modules (attendance, payroll, leave, employees, ...) each carry their
own model, repository protocol, MySQL repository, service and Flask controller.
"""
