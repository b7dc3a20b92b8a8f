"""notebridge: turns clinical notes into patient-friendly documents, with clinician sign-off."""

__version__ = "0.1.0"
