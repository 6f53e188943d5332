"""Unit tests for notification preference resolution.

Run with: pytest tests/test_notifications.py -v
"""

import pytest

from notifications.domain import (
    ChannelPreference,
    NotificationChannel,
    NotificationPreference,
    NotificationPreferenceError,
    NotificationType,
)


class TestDefaults:
    def test_in_app_and_email_enabled_by_default(self):
        preference = NotificationPreference.create("u1")
        assert preference.is_channel_enabled(NotificationChannel.IN_APP)
        assert preference.is_channel_enabled(NotificationChannel.EMAIL)
        assert not preference.is_channel_enabled(NotificationChannel.PUSH)
        assert not preference.is_channel_enabled(NotificationChannel.SMS)

    def test_every_type_enabled_by_default(self):
        preference = NotificationPreference.create("u1")
        assert all(preference.is_type_enabled(kind) for kind in NotificationType)

    def test_enabled_channels_follow_declaration_order(self):
        preference = NotificationPreference.create("u1")
        assert preference.get_enabled_channels_for_type(NotificationType.EVENT_REMINDER) == [
            NotificationChannel.EMAIL,
            NotificationChannel.IN_APP,
        ]

    def test_overrides_at_creation(self):
        preference = NotificationPreference.create(
            "u1",
            channel_preferences={"SMS": {"enabled": True, "settings": {"phone": "+34600000000"}}},
            type_preferences={"reminder": {"enabled": False}},
        )
        assert preference.is_channel_enabled(NotificationChannel.SMS)
        assert preference.get_channel_settings(NotificationChannel.SMS) == {"phone": "+34600000000"}
        assert not preference.is_type_enabled(NotificationType.REMINDER)

    def test_user_is_required(self):
        with pytest.raises(NotificationPreferenceError):
            NotificationPreference.create(" ")

    def test_unknown_channel_is_rejected(self):
        with pytest.raises(NotificationPreferenceError):
            NotificationPreference.create("u1", channel_preferences={"PIGEON": {"enabled": True}})


class TestResolution:
    """Tests for is_channel_enabled_for_type."""

    def test_disabled_type_blocks_every_channel(self):
        preference = NotificationPreference.create("u1").disable_type(NotificationType.EVENT_CANCELLED)
        assert not preference.is_channel_enabled_for_type(
            NotificationType.EVENT_CANCELLED, NotificationChannel.EMAIL
        )
        assert preference.get_enabled_channels_for_type(NotificationType.EVENT_CANCELLED) == []

    def test_disabled_channel_is_never_used(self):
        preference = NotificationPreference.create("u1")
        assert not preference.is_channel_enabled_for_type(NotificationType.INFO, NotificationChannel.PUSH)

    def test_allow_list_restricts_channels(self):
        preference = NotificationPreference.create("u1").update_type_preference(
            NotificationType.ATTENDEE_ADDED, True, [NotificationChannel.EMAIL]
        )
        assert preference.is_channel_enabled_for_type(NotificationType.ATTENDEE_ADDED, NotificationChannel.EMAIL)
        assert not preference.is_channel_enabled_for_type(
            NotificationType.ATTENDEE_ADDED, NotificationChannel.IN_APP
        )

    def test_allow_list_cannot_enable_globally_disabled_channel(self):
        preference = NotificationPreference.create("u1").update_type_preference(
            NotificationType.ATTENDEE_ADDED, True, [NotificationChannel.PUSH, NotificationChannel.EMAIL]
        )
        assert preference.get_enabled_channels_for_type(NotificationType.ATTENDEE_ADDED) == [
            NotificationChannel.EMAIL
        ]

    def test_enable_type_keeps_allow_list(self):
        preference = (
            NotificationPreference.create("u1")
            .update_type_preference("comment_added", False, ["EMAIL"])
            .enable_type("comment_added")
        )
        assert preference.type_preferences[NotificationType.COMMENT_ADDED].channels == (
            NotificationChannel.EMAIL,
        )


class TestUpdates:
    def test_channel_settings_are_merged(self):
        preference = (
            NotificationPreference.create("u1")
            .update_channel_preference("EMAIL", True, {"address": "a@example.com"})
            .update_channel_preference("EMAIL", True, {"digest": "daily"})
        )
        assert preference.get_channel_settings(NotificationChannel.EMAIL) == {
            "address": "a@example.com",
            "digest": "daily",
        }

    def test_updates_return_new_instances(self):
        original = NotificationPreference.create("u1")
        updated = original.update_channel_preference(NotificationChannel.PUSH, True)
        assert updated.is_channel_enabled(NotificationChannel.PUSH)
        assert not original.is_channel_enabled(NotificationChannel.PUSH)

    def test_preference_maps_are_read_only(self):
        preference = NotificationPreference.create("u1")
        with pytest.raises(TypeError):
            preference.channel_preferences[NotificationChannel.SMS] = None

    def test_channel_settings_are_copied_and_frozen(self):
        """Settings belong to the preference, not to the dict they were built from."""
        source = {"phone": "+34600000000"}
        channel = ChannelPreference(enabled=True, settings=source)
        source["phone"] = "+34611111111"

        assert channel.settings["phone"] == "+34600000000"
        with pytest.raises(TypeError):
            channel.settings["phone"] = "+34622222222"

    def test_returned_settings_do_not_leak_into_preference(self):
        preference = NotificationPreference.create("u1").update_channel_preference("SMS", True, {"phone": "1"})
        preference.get_channel_settings(NotificationChannel.SMS)["phone"] = "2"
        assert preference.get_channel_settings(NotificationChannel.SMS) == {"phone": "1"}
        assert preference.to_dict()["channel_preferences"]["SMS"]["settings"] == {"phone": "1"}

    def test_reconstitute_round_trip(self):
        preference = NotificationPreference.create("u1").update_type_preference("info", False, ["SMS"])
        restored = NotificationPreference.reconstitute(preference.to_dict())
        assert restored == preference
        assert restored.to_dict() == preference.to_dict()
