from django.db import models


class TimestampedModel(models.Model):
    """Abstract base with created/updated timestamps for all domain tables."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class University(TimestampedModel):
    """University from the AISHE directory, keyed by its AISHE code."""
    aishe_code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    state = models.CharField(max_length=128)
    district = models.CharField(max_length=128)
    website = models.CharField(max_length=255, null=True, blank=True)
    year_of_establishment = models.PositiveIntegerField(null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["state"], name="catalog_uni_state_3f1c2a_idx"),
            models.Index(fields=["district"], name="catalog_uni_distric_8d0e4b_idx"),
        ]
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.aishe_code})"


class College(TimestampedModel):
    """Affiliated college. The university link is weak: resolved at import time by
    code or name, and kept as NULL when no match exists. The ``university_*``
    text columns hold what the source said regardless of the link.
    """
    aishe_code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    state = models.CharField(max_length=128)
    district = models.CharField(max_length=128)
    website = models.CharField(max_length=255, null=True, blank=True)
    year_of_establishment = models.PositiveIntegerField(null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)
    college_type = models.CharField(max_length=128, null=True, blank=True)
    management = models.CharField(max_length=128, null=True, blank=True)
    university_aishe_code = models.CharField(max_length=32, null=True, blank=True)
    university_name = models.CharField(max_length=255, null=True, blank=True)
    university_type = models.CharField(max_length=128, null=True, blank=True)
    university = models.ForeignKey(
        University, null=True, blank=True, on_delete=models.SET_NULL, related_name="colleges"
    )

    class Meta:
        indexes = [
            models.Index(fields=["state"], name="catalog_col_state_5a7d19_idx"),
            models.Index(fields=["district"], name="catalog_col_distric_c2b6f0_idx"),
            models.Index(fields=["college_type"], name="catalog_col_college_9e41d3_idx"),
            models.Index(fields=["management"], name="catalog_col_managem_47b8aa_idx"),
            models.Index(fields=["university_aishe_code"], name="catalog_col_univers_1d6c5e_idx"),
        ]
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.aishe_code})"


class ImportRun(TimestampedModel):
    """Audit trail for one spreadsheet import and its final stats."""

    class Status(models.TextChoices):
        RUNNING = "running", "Running"
        DONE = "done", "Done"
        FAILED = "failed", "Failed"

    action = models.CharField(max_length=32)
    source_path = models.CharField(max_length=512, blank=True)
    batch_size = models.PositiveIntegerField(default=500)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.RUNNING)
    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    stats = models.JSONField(default=dict, blank=True)
    error = models.TextField(blank=True)

    class Meta:
        indexes = [models.Index(fields=["action", "created_at"], name="catalog_imp_action_6b2f90_idx")]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.action}:{self.status}@{self.created_at:%Y-%m-%d %H:%M:%S}"
