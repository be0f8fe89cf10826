"""Employee Portal package.

A single-user employee-management prototype organized by feature modules
(accounts, departments, employees, requests) around a local key/value store
that migrates and repairs its persisted snapshot on every boot.
"""
