from __future__ import annotations

import os

from django import forms
from django.conf import settings
from django.contrib.auth import authenticate
from django.core.files.uploadedfile import UploadedFile
from django.utils import timezone

from board.models import Ban, Complaint, Post, PrivateMessage, Rating, Section, Topic, User


def _validate_avatar(upload) -> None:
    if not isinstance(upload, UploadedFile):
        return
    extension = os.path.splitext(upload.name)[1].lower().lstrip(".")
    allowed = getattr(settings, "AVATAR_EXTENSIONS", ["jpg", "jpeg", "png"])
    if extension not in allowed:
        raise forms.ValidationError(f"Avatars must be one of: {', '.join(allowed)}.")


class UserRegistrationForm(forms.ModelForm):
    password = forms.CharField(widget=forms.PasswordInput, strip=False)

    class Meta:
        model = User
        fields = ["username", "email", "avatar"]

    def clean_avatar(self):
        avatar = self.cleaned_data.get("avatar")
        _validate_avatar(avatar)
        return avatar

    def save(self, commit: bool = True) -> User:
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password"])
        if commit:
            user.save()
        return user


class UserUpdateForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ["username", "email", "avatar"]

    def clean_avatar(self):
        avatar = self.cleaned_data.get("avatar")
        _validate_avatar(avatar)
        return avatar


class LoginForm(forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(widget=forms.PasswordInput, strip=False)

    def __init__(self, *args, request=None, **kwargs) -> None:
        self.request = request
        self.user: User | None = None
        super().__init__(*args, **kwargs)

    def clean(self) -> dict[str, str]:
        cleaned = super().clean()
        username = cleaned.get("username")
        password = cleaned.get("password")
        if username and password:
            self.user = authenticate(self.request, username=username, password=password)
            if self.user is None:
                raise forms.ValidationError("Invalid username or password.")
        return cleaned


class SectionForm(forms.ModelForm):
    class Meta:
        model = Section
        fields = ["name", "description"]


class TopicForm(forms.ModelForm):
    class Meta:
        model = Topic
        fields = ["title", "content"]
        widgets = {"content": forms.Textarea(attrs={"rows": 6})}


class TopicPinningForm(forms.Form):
    is_pinned = forms.BooleanField(required=False)


class TopicOpeningForm(forms.Form):
    is_open = forms.BooleanField(required=False)


class PostForm(forms.ModelForm):
    class Meta:
        model = Post
        fields = ["content"]
        widgets = {"content": forms.Textarea(attrs={"rows": 4})}


class PrivateMessageForm(forms.ModelForm):
    recipients = forms.CharField(
        label="To",
        max_length=1000,
        help_text="Comma-separated usernames.",
    )

    class Meta:
        model = PrivateMessage
        fields = ["title", "content"]
        widgets = {"content": forms.Textarea(attrs={"rows": 6})}

    def clean_recipients(self) -> list[User]:
        names = [name.strip() for name in self.cleaned_data["recipients"].split(",") if name.strip()]
        if not names:
            raise forms.ValidationError("Name at least one recipient.")
        users = list(User.objects.filter(username__in=names, is_deleted=False))
        missing = sorted(set(names) - {user.username for user in users})
        if missing:
            raise forms.ValidationError(f"Unknown users: {', '.join(missing)}.")
        return users


class PrivateMessageUpdateForm(forms.ModelForm):
    class Meta:
        model = PrivateMessage
        fields = ["title", "content"]
        widgets = {"content": forms.Textarea(attrs={"rows": 6})}


class RatingValueForm(forms.Form):
    value = forms.TypedChoiceField(choices=Rating.VALUE_CHOICES, coerce=int)


class RatingForm(RatingValueForm):
    target_kind = forms.CharField(max_length=20)
    target_id = forms.IntegerField(min_value=1)


class ComplaintForm(forms.ModelForm):
    class Meta:
        model = Complaint
        fields = ["reason"]
        widgets = {"reason": forms.Textarea(attrs={"rows": 4})}


class BanUpdateForm(forms.ModelForm):
    class Meta:
        model = Ban
        fields = ["reason", "expires_at"]
        widgets = {"expires_at": forms.DateTimeInput(attrs={"type": "datetime-local"})}

    def clean_expires_at(self):
        expires_at = self.cleaned_data["expires_at"]
        if expires_at <= timezone.now():
            raise forms.ValidationError("The ban must expire in the future.")
        return expires_at


class BanForm(BanUpdateForm):
    username = forms.CharField(max_length=150)

    class Meta(BanUpdateForm.Meta):
        fields = ["username", "reason", "expires_at"]
