"""Resolve the (kind, id) target references used by ratings and complaints."""
from __future__ import annotations

from django.contrib.contenttypes.models import ContentType
from django.http import Http404
from django.shortcuts import get_object_or_404

from board.models import Post, PrivateMessage, Topic

RATEABLE_MODELS = {
    Topic.KIND: Topic,
    Post.KIND: Post,
    PrivateMessage.KIND: PrivateMessage,
}

def model_for_kind(kind: str):
    try:
        return RATEABLE_MODELS[kind]
    except KeyError:
        raise Http404(f"Unknown content kind: {kind}") from None


def get_rateable_or_404(kind: str, pk: int):
    return get_object_or_404(model_for_kind(kind), pk=pk)


def content_type_for(rateable) -> ContentType:
    return ContentType.objects.get_for_model(rateable)


def describe(rateable) -> str:
    if rateable is None:
        return "[removed]"
    if isinstance(rateable, Post):
        return f"Post #{rateable.pk} in {rateable.discussion}"
    return f"{rateable.KIND.title()} “{rateable.title}”"
