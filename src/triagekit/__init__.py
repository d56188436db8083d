"""triagekit: scheduled, audit-logged forensic triage acquisition."""

__version__ = "1.2.0"
