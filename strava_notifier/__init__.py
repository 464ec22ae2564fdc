"""Relay completed Strava activities to Telegram chats."""
