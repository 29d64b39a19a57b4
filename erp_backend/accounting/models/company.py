# accounting/models/company.py

from __future__ import annotations

from django.db import models


class CompanyProfile(models.Model):
    """
    Singleton company settings row (pk=1).

    primary_upi_id selects which bank ledger receives advance payments.
    """

    SINGLETON_PK = 1

    name = models.CharField(max_length=200, blank=True, default="")
    gstin = models.CharField(max_length=15, blank=True, default="")
    primary_upi_id = models.CharField(max_length=100, blank=True, default="")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Company Profile"
        verbose_name_plural = "Company Profile"

    def __str__(self):
        return self.name or "Company Profile"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        self.primary_upi_id = (self.primary_upi_id or "").strip()
        return super().save(*args, **kwargs)

    @classmethod
    def current(cls) -> "CompanyProfile | None":
        return cls.objects.filter(pk=cls.SINGLETON_PK).first()
