from django.db import models


class MessageLog(models.Model):
    user = models.ForeignKey("accounts.User", on_delete=models.CASCADE)
    kind = models.CharField(max_length=64)
    ref = models.CharField(max_length=128)
    subject = models.CharField(max_length=200)
    sent_at = models.DateTimeField(auto_now_add=True)
    provider_id = models.CharField(max_length=128, blank=True, null=True)

    class Meta:
        unique_together = [("user", "ref")]


class EmailEvent(models.Model):
    user = models.ForeignKey("accounts.User", on_delete=models.SET_NULL, null=True, blank=True)
    kind = models.CharField(max_length=64, blank=True)
    event = models.CharField(max_length=32)
    provider_id = models.CharField(max_length=128, blank=True, null=True)
    email = models.EmailField()
    timestamp = models.DateTimeField(auto_now_add=True)
    payload = models.JSONField(default=dict, blank=True)
