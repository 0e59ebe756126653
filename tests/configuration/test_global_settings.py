import pytest

from configuration.models import GlobalSettings
from configuration.services import (
    get_global_settings,
    merge_custom_fields,
    merge_fields,
    read_custom_fields,
)


class TestMergeFields:
    def test_updates_override_and_siblings_survive(self):
        current = {"storeName": "Demo", "payoutScheduleFrequency": "weekly"}
        merged = merge_fields(current, {"payoutScheduleFrequency": "monthly"})
        assert merged == {"storeName": "Demo", "payoutScheduleFrequency": "monthly"}
        assert current["payoutScheduleFrequency"] == "weekly"

    def test_none_removes_key(self):
        assert merge_fields({"a": 1, "b": 2}, {"a": None}) == {"b": 2}

    def test_non_dict_current_is_treated_as_empty(self):
        assert merge_fields(None, {"a": 1}) == {"a": 1}


@pytest.mark.django_db
class TestGlobalSettingsStore:
    def test_record_is_created_once(self):
        first = get_global_settings()
        second = get_global_settings()
        assert first.pk == second.pk == GlobalSettings.SINGLETON_PK
        assert GlobalSettings.objects.count() == 1

    def test_read_returns_copy(self, global_settings):
        fields = read_custom_fields()
        fields["injected"] = True
        assert "injected" not in read_custom_fields()

    def test_merge_preserves_sibling_keys(self, global_settings):
        global_settings.custom_fields = {"theme": "dark", "payoutScheduleFrequency": "weekly"}
        global_settings.save()

        result = merge_custom_fields({"payoutSchedulerLastRun": "2026-01-01T00:00:00+00:00"})

        assert result == {
            "theme": "dark",
            "payoutScheduleFrequency": "weekly",
            "payoutSchedulerLastRun": "2026-01-01T00:00:00+00:00",
        }
        global_settings.refresh_from_db()
        assert global_settings.custom_fields == result
