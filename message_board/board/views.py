from __future__ import annotations

import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.core.paginator import Paginator
from django.db import transaction
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from board.decorators import forbidden, login_required, moderator_required, unauthorized
from board.forms import (
    BanForm,
    BanUpdateForm,
    ComplaintForm,
    LoginForm,
    PostForm,
    PrivateMessageForm,
    PrivateMessageUpdateForm,
    RatingForm,
    RatingValueForm,
    SectionForm,
    TopicForm,
    TopicOpeningForm,
    TopicPinningForm,
    UserRegistrationForm,
    UserUpdateForm,
)
from board.models import Ban, Complaint, Post, PrivateMessage, Rating, Section, Topic, User
from board.services import bans as ban_service
from board.services import configuration as config_service
from board.services import discussions as discussion_service
from board.services import permissions
from board.services import ratings as rating_service
from board.services import rateables as rateable_service

logger = logging.getLogger(__name__)

UNPROCESSABLE = 422


def _invalid(request: HttpRequest, template: str, context: dict[str, object]) -> HttpResponse:
    return render(request, template, context, status=UNPROCESSABLE)


def _page(request: HttpRequest, queryset, setting_key: str):
    paginator = Paginator(queryset, config_service.page_size(setting_key))
    return paginator.get_page(request.GET.get("page"))


# Sections --------------------------------------------------------------------


@require_GET
def index(request: HttpRequest) -> HttpResponse:
    return _section_list(request)


@require_http_methods(["GET", "POST"])
def section_collection(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        return _section_list(request)
    if not request.user.is_authenticated:
        return unauthorized(request)
    if not permissions.is_moderator(request.user):
        return forbidden(request, "Moderator permissions required.")

    form = SectionForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/section_form.html", {"form": form})
    section = form.save()
    messages.success(request, f"Section “{section.name}” created.")
    return redirect(section)


def _section_list(request: HttpRequest) -> HttpResponse:
    sections = Section.objects.all()
    return render(request, "board/section_list.html", {"sections": sections})


@require_GET
@moderator_required
def section_new(request: HttpRequest) -> HttpResponse:
    return render(request, "board/section_form.html", {"form": SectionForm()})


@require_http_methods(["GET", "PUT", "DELETE"])
def section_detail(request: HttpRequest, pk: int) -> HttpResponse:
    section = get_object_or_404(Section, pk=pk)
    if request.method == "GET":
        topics = section.topics.select_related("author")
        context = {
            "section": section,
            "page_obj": _page(request, topics, config_service.TOPICS_PER_PAGE),
        }
        return render(request, "board/section_detail.html", context)

    if not request.user.is_authenticated:
        return unauthorized(request)
    if not permissions.is_moderator(request.user):
        return forbidden(request, "Moderator permissions required.")

    if request.method == "DELETE":
        with transaction.atomic():
            section.delete()
        logger.info("%s deleted section %s", request.user.username, pk)
        messages.success(request, f"Section “{section.name}” deleted.")
        return redirect("board:index")

    form = SectionForm(request.POST, instance=section)
    if not form.is_valid():
        return _invalid(request, "board/section_form.html", {"form": form, "section": section})
    form.save()
    messages.success(request, "Section updated.")
    return redirect(section)


@require_GET
@moderator_required
def section_edit(request: HttpRequest, pk: int) -> HttpResponse:
    section = get_object_or_404(Section, pk=pk)
    return render(request, "board/section_form.html", {"form": SectionForm(instance=section), "section": section})


# Topics ----------------------------------------------------------------------


@require_GET
@login_required
def topic_new(request: HttpRequest, pk: int) -> HttpResponse:
    section = get_object_or_404(Section, pk=pk)
    return render(request, "board/topic_form.html", {"form": TopicForm(), "section": section})


@require_POST
@login_required
def section_topics(request: HttpRequest, pk: int) -> HttpResponse:
    section = get_object_or_404(Section, pk=pk)
    form = TopicForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/topic_form.html", {"form": form, "section": section})
    topic = form.save(commit=False)
    topic.section = section
    topic.author = request.user
    topic.save()
    return redirect(topic)


@require_http_methods(["GET", "PUT", "DELETE"])
def topic_detail(request: HttpRequest, pk: int) -> HttpResponse:
    topic = get_object_or_404(Topic.objects.select_related("section", "author"), pk=pk)
    if request.method == "GET":
        posts = topic.posts.select_related("author")
        context = {
            "topic": topic,
            "page_obj": _page(request, posts, config_service.POSTS_PER_PAGE),
            "post_form": PostForm(),
        }
        return render(request, "board/topic_detail.html", context)

    if not request.user.is_authenticated:
        return unauthorized(request)
    if not permissions.can_modify(request.user, topic.author_id):
        return forbidden(request)

    if request.method == "DELETE":
        section = topic.section
        topic.delete()
        messages.success(request, "Topic deleted.")
        return redirect(section)

    form = TopicForm(request.POST, instance=topic)
    if not form.is_valid():
        return _invalid(request, "board/topic_form.html", {"form": form, "topic": topic, "section": topic.section})
    form.save()
    messages.success(request, "Topic updated.")
    return redirect(topic)


@require_GET
@login_required
def topic_edit(request: HttpRequest, pk: int) -> HttpResponse:
    topic = get_object_or_404(Topic, pk=pk)
    if not permissions.can_modify(request.user, topic.author_id):
        return forbidden(request)
    context = {"form": TopicForm(instance=topic), "topic": topic, "section": topic.section}
    return render(request, "board/topic_form.html", context)


@require_POST
@moderator_required
def topic_pinning(request: HttpRequest, pk: int) -> HttpResponse:
    topic = get_object_or_404(Topic, pk=pk)
    form = TopicPinningForm(request.POST)
    if form.is_valid():
        discussion_service.set_pinned(request.user, topic, form.cleaned_data["is_pinned"])
    return redirect(topic)


@require_POST
@moderator_required
def topic_opening(request: HttpRequest, pk: int) -> HttpResponse:
    topic = get_object_or_404(Topic, pk=pk)
    form = TopicOpeningForm(request.POST)
    if form.is_valid():
        discussion_service.set_open(request.user, topic, form.cleaned_data["is_open"])
    return redirect(topic)


# Posts -----------------------------------------------------------------------


def _create_post(request: HttpRequest, discussion: Topic | PrivateMessage, template: str, context: dict[str, object]):
    form = PostForm(request.POST)
    if not form.is_valid():
        return _invalid(request, template, {**context, "post_form": form})
    try:
        post = discussion_service.add_post(request.user, discussion, form.cleaned_data["content"])
    except discussion_service.DiscussionClosed as exc:
        form.add_error(None, str(exc))
        return _invalid(request, template, {**context, "post_form": form})
    return redirect(post.get_absolute_url())


@require_POST
@login_required
def topic_posts(request: HttpRequest, pk: int) -> HttpResponse:
    topic = get_object_or_404(Topic, pk=pk)
    posts = topic.posts.select_related("author")
    context = {"topic": topic, "page_obj": _page(request, posts, config_service.POSTS_PER_PAGE)}
    return _create_post(request, topic, "board/topic_detail.html", context)


@require_POST
@login_required
def message_posts(request: HttpRequest, pk: int) -> HttpResponse:
    message = get_object_or_404(PrivateMessage, pk=pk)
    if not message.has_participant(request.user):
        return forbidden(request, "Only participants can reply to this conversation.")
    context = {"message": message, "posts": message.posts.select_related("author")}
    return _create_post(request, message, "board/message_detail.html", context)


@require_http_methods(["PUT", "DELETE"])
@login_required
def post_detail(request: HttpRequest, pk: int) -> HttpResponse:
    post = get_object_or_404(Post.objects.select_related("topic", "private_message"), pk=pk)
    if not (permissions.can_view(request.user, post) and permissions.can_modify(request.user, post.author_id)):
        return forbidden(request)

    if request.method == "DELETE":
        destination = post.discussion.get_absolute_url()
        post.delete()
        messages.success(request, "Post deleted.")
        return redirect(destination)

    form = PostForm(request.POST, instance=post)
    if not form.is_valid():
        return _invalid(request, "board/post_form.html", {"form": form, "post": post})
    form.save()
    return redirect(post.get_absolute_url())


@require_GET
@login_required
def post_edit(request: HttpRequest, pk: int) -> HttpResponse:
    post = get_object_or_404(Post, pk=pk)
    if not (permissions.can_view(request.user, post) and permissions.can_modify(request.user, post.author_id)):
        return forbidden(request)
    return render(request, "board/post_form.html", {"form": PostForm(instance=post), "post": post})


# Users -----------------------------------------------------------------------


@require_http_methods(["GET", "POST"])
def user_collection(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        users = User.objects.filter(is_deleted=False)
        return render(request, "board/user_list.html", {"users": users})

    if request.user.is_authenticated:
        return redirect("board:index")
    form = UserRegistrationForm(request.POST, request.FILES)
    if not form.is_valid():
        return _invalid(request, "board/user_register.html", {"form": form})
    user = form.save()
    logger.info("Registered user %s", user.username)
    messages.success(request, "Account created. You can sign in now.")
    return redirect("board:login")


@require_GET
def user_new(request: HttpRequest) -> HttpResponse:
    if request.user.is_authenticated:
        return redirect("board:index")
    return render(request, "board/user_register.html", {"form": UserRegistrationForm()})


@require_http_methods(["GET", "PUT", "DELETE"])
def user_detail(request: HttpRequest, pk: int) -> HttpResponse:
    profile = get_object_or_404(User, pk=pk, is_deleted=False)
    if request.method == "GET":
        context = {
            "profile": profile,
            "topics": profile.topics.select_related("section")[:10],
            "posts": profile.posts.filter(topic__isnull=False).select_related("topic")[:10],
        }
        return render(request, "board/user_detail.html", context)

    if not request.user.is_authenticated:
        return unauthorized(request)
    if not permissions.can_modify(request.user, profile.pk):
        return forbidden(request)

    if request.method == "DELETE":
        profile.is_deleted = True
        profile.save(update_fields=["is_deleted", "updated_at"])
        logger.info("%s deleted user %s", request.user.username, profile.username)
        if profile.pk == request.user.pk:
            logout(request)
            return redirect("board:index")
        messages.success(request, f"User {profile.username} deleted.")
        return redirect("board:users")

    form = UserUpdateForm(request.POST, request.FILES, instance=profile)
    if not form.is_valid():
        return _invalid(request, "board/user_edit.html", {"form": form, "profile": profile})
    form.save()
    messages.success(request, "Profile updated.")
    return redirect(profile)


@require_GET
@login_required
def user_edit(request: HttpRequest, pk: int) -> HttpResponse:
    profile = get_object_or_404(User, pk=pk, is_deleted=False)
    if not permissions.can_modify(request.user, profile.pk):
        return forbidden(request)
    return render(request, "board/user_edit.html", {"form": UserUpdateForm(instance=profile), "profile": profile})


# Authentication --------------------------------------------------------------


@require_http_methods(["GET", "POST"])
def login_view(request: HttpRequest) -> HttpResponse:
    if request.user.is_authenticated:
        if request.method == "POST":
            return redirect("board:forbidden")
        return redirect("board:index")

    next_url = request.POST.get("next") or request.GET.get("next") or ""
    if request.method == "GET":
        return render(request, "board/login.html", {"form": LoginForm(request=request), "next": next_url})

    form = LoginForm(request.POST, request=request)
    if not form.is_valid():
        logger.warning("Failed login for %r", request.POST.get("username", ""))
        return _invalid(request, "board/login.html", {"form": form, "next": next_url})

    user = form.user
    ban = ban_service.active_ban_for(user)
    if ban is not None:
        logger.warning("Rejected login for banned user %s", user.username)
        form.add_error(
            None,
            f"This user is banned. The ban will be lifted at {ban_service.format_expiry(ban)}.",
        )
        return _invalid(request, "board/login.html", {"form": form, "next": next_url})

    login(request, user)
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect("board:index")


@require_POST
@login_required
def logout_view(request: HttpRequest) -> HttpResponse:
    logout(request)
    return redirect("board:index")


# Private messages ------------------------------------------------------------


@require_http_methods(["GET", "POST"])
@login_required
def message_collection(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        conversations = request.user.private_messages.select_related("author").prefetch_related("participants")
        return render(request, "board/message_list.html", {"conversations": conversations})

    form = PrivateMessageForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/message_form.html", {"form": form})
    message = discussion_service.start_conversation(
        request.user,
        form.cleaned_data["recipients"],
        title=form.cleaned_data["title"],
        content=form.cleaned_data["content"],
    )
    return redirect(message)


@require_GET
@login_required
def message_new(request: HttpRequest) -> HttpResponse:
    initial = {"recipients": request.GET.get("to", "")}
    return render(request, "board/message_form.html", {"form": PrivateMessageForm(initial=initial)})


@require_http_methods(["GET", "PUT"])
@login_required
def message_detail(request: HttpRequest, pk: int) -> HttpResponse:
    message = get_object_or_404(PrivateMessage.objects.select_related("author"), pk=pk)
    if request.method == "GET":
        if not message.has_participant(request.user):
            return forbidden(request, "Only participants can read this conversation.")
        context = {
            "message": message,
            "posts": message.posts.select_related("author"),
            "post_form": PostForm(),
        }
        return render(request, "board/message_detail.html", context)

    if not permissions.can_modify_message(request.user, message):
        return forbidden(request)
    form = PrivateMessageUpdateForm(request.POST, instance=message)
    if not form.is_valid():
        return _invalid(request, "board/message_edit.html", {"form": form, "message": message})
    form.save()
    return redirect(message)


@require_GET
@login_required
def message_edit(request: HttpRequest, pk: int) -> HttpResponse:
    message = get_object_or_404(PrivateMessage, pk=pk)
    if not permissions.can_modify_message(request.user, message):
        return forbidden(request)
    context = {"form": PrivateMessageUpdateForm(instance=message), "message": message}
    return render(request, "board/message_edit.html", context)


# Ratings ---------------------------------------------------------------------


@require_POST
@login_required
def rating_collection(request: HttpRequest) -> HttpResponse:
    form = RatingForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/rating_error.html", {"form": form})
    target = rateable_service.get_rateable_or_404(form.cleaned_data["target_kind"], form.cleaned_data["target_id"])
    if not permissions.can_view(request.user, target):
        return forbidden(request)
    try:
        rating_service.rate(request.user, target, form.cleaned_data["value"])
    except rating_service.DuplicateRating as exc:
        form.add_error(None, str(exc))
        return _invalid(request, "board/rating_error.html", {"form": form, "target": target})
    return redirect(target.get_absolute_url())


@require_http_methods(["PUT", "DELETE"])
@login_required
def rating_detail(request: HttpRequest, pk: int) -> HttpResponse:
    rating = get_object_or_404(Rating, pk=pk)
    if not permissions.can_modify_rating(request.user, rating):
        return forbidden(request)
    target = rating.target

    if request.method == "DELETE":
        rating.delete()
        return redirect(target.get_absolute_url())

    form = RatingValueForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/rating_error.html", {"form": form, "target": target})
    rating_service.change(rating, form.cleaned_data["value"])
    return redirect(target.get_absolute_url())


# Rateables & complaints ------------------------------------------------------


def _visible_rateable(request: HttpRequest, kind: str, pk: int):
    target = rateable_service.get_rateable_or_404(kind, pk)
    return target, permissions.can_view(request.user, target)


@require_GET
def rateable_detail(request: HttpRequest, kind: str, pk: int) -> HttpResponse:
    target, visible = _visible_rateable(request, kind, pk)
    if not visible:
        if not request.user.is_authenticated:
            return unauthorized(request)
        return forbidden(request)
    return redirect(target.get_absolute_url())


@require_GET
@login_required
def complaint_new(request: HttpRequest, kind: str, pk: int) -> HttpResponse:
    target, visible = _visible_rateable(request, kind, pk)
    if not visible:
        return forbidden(request)
    return render(request, "board/complaint_form.html", {"form": ComplaintForm(), "target": target})


@require_POST
@login_required
def rateable_complaints(request: HttpRequest, kind: str, pk: int) -> HttpResponse:
    target, visible = _visible_rateable(request, kind, pk)
    if not visible:
        return forbidden(request)
    form = ComplaintForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/complaint_form.html", {"form": form, "target": target})
    complaint = form.save(commit=False)
    complaint.author = request.user
    complaint.target = target
    complaint.save()
    logger.info("%s filed a complaint about %s#%s", request.user.username, target.KIND, target.pk)
    messages.success(request, "Thanks, a moderator will take a look.")
    return redirect(target.get_absolute_url())


@require_GET
@moderator_required
def complaint_list(request: HttpRequest) -> HttpResponse:
    complaints = Complaint.objects.select_related("author", "content_type")
    return render(request, "board/complaint_list.html", {"complaints": complaints})


@require_http_methods(["DELETE"])
@moderator_required
def complaint_detail(request: HttpRequest, pk: int) -> HttpResponse:
    complaint = get_object_or_404(Complaint, pk=pk)
    complaint.delete()
    logger.info("%s dismissed complaint %s", request.user.username, pk)
    messages.success(request, "Complaint dismissed.")
    return redirect("board:complaints")


# Bans ------------------------------------------------------------------------


@require_http_methods(["GET", "POST"])
@moderator_required
def ban_collection(request: HttpRequest) -> HttpResponse:
    if request.method == "GET":
        bans = Ban.objects.select_related("user")
        return render(request, "board/ban_list.html", {"bans": bans})

    banned = get_object_or_404(User, username=request.POST.get("username", "").strip(), is_deleted=False)
    form = BanForm(request.POST)
    if not form.is_valid():
        return _invalid(request, "board/ban_form.html", {"form": form})
    try:
        ban_service.issue_ban(
            request.user,
            banned,
            reason=form.cleaned_data["reason"],
            expires_at=form.cleaned_data["expires_at"],
        )
    except ban_service.BanConflict as exc:
        form.add_error(None, str(exc))
        return _invalid(request, "board/ban_form.html", {"form": form})
    messages.success(request, f"{banned.username} is banned.")
    return redirect("board:bans")


@require_GET
@moderator_required
def ban_new(request: HttpRequest) -> HttpResponse:
    initial = {"username": request.GET.get("username", "")}
    return render(request, "board/ban_form.html", {"form": BanForm(initial=initial)})


@require_http_methods(["PUT", "DELETE"])
@moderator_required
def ban_detail(request: HttpRequest, pk: int) -> HttpResponse:
    ban = get_object_or_404(Ban.objects.select_related("user"), pk=pk)
    if request.method == "DELETE":
        ban_service.lift_ban(request.user, ban)
        messages.success(request, "Ban lifted.")
        return redirect("board:bans")

    form = BanUpdateForm(request.POST, instance=ban)
    if not form.is_valid():
        return _invalid(request, "board/ban_form.html", {"form": form, "ban": ban})
    ban_service.update_ban(
        request.user,
        ban,
        reason=form.cleaned_data["reason"],
        expires_at=form.cleaned_data["expires_at"],
    )
    messages.success(request, "Ban updated.")
    return redirect("board:bans")


@require_GET
@moderator_required
def ban_edit(request: HttpRequest, pk: int) -> HttpResponse:
    ban = get_object_or_404(Ban.objects.select_related("user"), pk=pk)
    return render(request, "board/ban_form.html", {"form": BanUpdateForm(instance=ban), "ban": ban})


# Errors & tokens -------------------------------------------------------------


@require_GET
def forbidden_page(request: HttpRequest) -> HttpResponse:
    return render(request, "403.html", {"message": "You do not have permission to do that."})


@require_GET
def csrf_token(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"token": get_token(request)})


def csrf_failure(request: HttpRequest, reason: str = "") -> HttpResponse:
    logger.warning("CSRF check failed for %s %s: %s", request.method, request.path, reason)
    return render(request, "400.html", {"reason": reason}, status=400)