from django.db import models


class GlobalConfig(models.Model):
    """Singleton row (pk=1) read by every client and edited by admins only."""

    SINGLETON_PK = 1

    upi_id = models.CharField(max_length=100, help_text="Admin UPI id shown for payments")
    qr_url = models.TextField(blank=True, help_text="QR image reference")
    chat_disabled = models.BooleanField(default=False)
    auto_payment_enabled = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "global configuration"
        verbose_name_plural = "global configuration"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("The global configuration cannot be deleted.")

    def __str__(self):
        return "Global configuration"
