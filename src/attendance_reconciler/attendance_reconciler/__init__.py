"""Attendance Reconciler package.

Turns raw biometric scans into per-shift attendance determinations. The
package is organized by feature modules (employees, scans, schedules,
grouping, attendance, reconciliation, ...) with a thin Flask/CLI trigger
layer on top of service and repository layers.
"""
