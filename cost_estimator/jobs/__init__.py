"""
Background Jobs
================
Scheduled jobs for keeping catalog prices current.
"""

from cost_estimator.jobs.scheduler import JobScheduler

__all__ = ["JobScheduler"]
