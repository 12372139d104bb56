from django.db import models
from django.contrib.auth.models import User


class RideCreditAccount(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='ride_credit')
    balance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username}'s ride credit: {self.balance}"


class RideCreditTransaction(models.Model):
    CREDIT = 'credit'
    DEBIT = 'debit'
    TRANSACTION_TYPE = (
        (CREDIT, 'credit'),
        (DEBIT, 'debit'),
    )

    account = models.ForeignKey(RideCreditAccount, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPE)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    title = models.CharField(max_length=32, default='adjustment')
    description = models.TextField(blank=True, max_length=150)
    reference_id = models.CharField(max_length=32, blank=True, default='')
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.account.user.username} {self.transaction_type} of {self.amount} on {self.timestamp}"
