from decimal import Decimal

from django import forms
from django.contrib.auth.forms import UserCreationForm


class CreateOrderForm(forms.Form):
    """
    Form a customer fills in to place a new laundry order.
    """
    client_name = forms.CharField(max_length=255, label="Your Name")
    load_count = forms.IntegerField(min_value=1, initial=1, label="Number of Loads")
    instructions = forms.CharField(
        required=False,
        max_length=1000,
        widget=forms.Textarea(attrs={"rows": 3}),
        label="Special Instructions",
        help_text="Optional, e.g. separate colours",
    )

    def clean_client_name(self):
        """
        Whitespace-only names are rejected.
        """
        name = self.cleaned_data["client_name"].strip()
        if not name:
            raise forms.ValidationError("Name cannot be empty.")
        return name


class ExpenseForm(forms.Form):
    """
    Form used by admins to log a business expense.
    """
    description = forms.CharField(max_length=255)

    amount = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
        help_text="Amount in ZAR"
    )

    # Defaults to now when left blank
    date = forms.DateTimeField(required=False)

    def clean_description(self):
        text = self.cleaned_data["description"].strip()
        if not text:
            raise forms.ValidationError("Description cannot be empty.")
        return text


class SignUpForm(UserCreationForm):
    email = forms.EmailField(required=False)

    class Meta(UserCreationForm.Meta):
        fields = ("username", "email")
