"""Taskboard: task tracking API with live query subscriptions."""
