# accounts/forms.py
# ✅ Signup form (username, email, password) and the display-name form.

from django import forms                              # build HTML forms safely
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import UserCreationForm

User = get_user_model()                               # supports custom User if you add one later


class SignupForm(UserCreationForm):
    """
    ✅ Our signup form:
       - Requires a unique email (clean_email)
       - Optional display name, shown in the dashboard header
    """

    # 📧 Make email REQUIRED and explain why
    email = forms.EmailField(
        required=True,                                     # ← force users to provide an email
        label="Email",
        help_text="Used for password resets. Must be unique.",
    )

    # 🙋 Name shown on the dashboard ("Welcome back, …")
    first_name = forms.CharField(
        required=False,
        max_length=150,
        label="Display name",
    )

    class Meta(UserCreationForm.Meta):
        model = User                                       # ← the auth user model
        fields = ("username", "email", "first_name", "password1", "password2")

    def clean_email(self):
        """✅ Enforce UNIQUE email (case-insensitive)."""
        email = (self.cleaned_data.get("email") or "").strip()

        if not email:
            raise forms.ValidationError("Email is required.")

        # 🚫 Check for duplicates (case-insensitive)
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account with this email already exists.")

        return email

    def save(self, commit=True):
        """💾 Create the User with email + display name attached."""
        user = super().save(commit=False)
        user.email = self.cleaned_data["email"]
        user.first_name = " ".join((self.cleaned_data.get("first_name") or "").split())
        if commit:
            user.save()
        return user


class DisplayNameForm(forms.ModelForm):
    """A tiny form that edits only the display name (User.first_name)."""

    class Meta:
        model = User
        fields = ["first_name"]
        labels = {"first_name": "Display name"}

    def clean_first_name(self):
        name = " ".join((self.cleaned_data.get("first_name") or "").split())
        if not name:
            raise forms.ValidationError("Display name cannot be empty.")
        return name
