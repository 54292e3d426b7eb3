from __future__ import annotations

from django.urls import path

from . import views

app_name = "board"

urlpatterns = [
    path("", views.index, name="index"),
    path("sections", views.section_collection, name="sections"),
    path("sections/new", views.section_new, name="section_new"),
    path("sections/<int:pk>", views.section_detail, name="section_detail"),
    path("sections/<int:pk>/edit", views.section_edit, name="section_edit"),
    path("sections/<int:pk>/topics", views.section_topics, name="section_topics"),
    path("sections/<int:pk>/topics/new", views.topic_new, name="topic_new"),
    path("topics/<int:pk>", views.topic_detail, name="topic_detail"),
    path("topics/<int:pk>/edit", views.topic_edit, name="topic_edit"),
    path("topics/<int:pk>/pinning", views.topic_pinning, name="topic_pinning"),
    path("topics/<int:pk>/opening", views.topic_opening, name="topic_opening"),
    path("topics/<int:pk>/posts", views.topic_posts, name="topic_posts"),
    path("posts/<int:pk>", views.post_detail, name="post_detail"),
    path("posts/<int:pk>/edit", views.post_edit, name="post_edit"),
    path("users", views.user_collection, name="users"),
    path("users/new", views.user_new, name="user_new"),
    path("users/<int:pk>", views.user_detail, name="user_detail"),
    path("users/<int:pk>/edit", views.user_edit, name="user_edit"),
    path("login", views.login_view, name="login"),
    path("logout", views.logout_view, name="logout"),
    path("messages", views.message_collection, name="messages"),
    path("messages/new", views.message_new, name="message_new"),
    path("messages/<int:pk>", views.message_detail, name="message_detail"),
    path("messages/<int:pk>/edit", views.message_edit, name="message_edit"),
    path("messages/<int:pk>/posts", views.message_posts, name="message_posts"),
    path("ratings", views.rating_collection, name="ratings"),
    path("ratings/<int:pk>", views.rating_detail, name="rating_detail"),
    path("rateables/<str:kind>/<int:pk>", views.rateable_detail, name="rateable_detail"),
    path("rateables/<str:kind>/<int:pk>/complaints", views.rateable_complaints, name="rateable_complaints"),
    path("rateables/<str:kind>/<int:pk>/complaints/new", views.complaint_new, name="complaint_new"),
    path("complaints", views.complaint_list, name="complaints"),
    path("complaints/<int:pk>", views.complaint_detail, name="complaint_detail"),
    path("bans", views.ban_collection, name="bans"),
    path("bans/new", views.ban_new, name="ban_new"),
    path("bans/<int:pk>", views.ban_detail, name="ban_detail"),
    path("bans/<int:pk>/edit", views.ban_edit, name="ban_edit"),
    path("forbidden", views.forbidden_page, name="forbidden"),
    path("csrf-token", views.csrf_token, name="csrf_token"),
]
