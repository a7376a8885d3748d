"""Property-based tests for Pydantic models.

Feature: offline-sync
"""

import pytest
import structlog
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from offline_sync.models import ChangeListVersions, NetworkChangeList, NewsResource, Topic
from offline_sync.sync.models import SyncRunReport, SyncState

log = structlog.stdlib.get_logger()


@st.composite
def change_list_payload_strategy(draw):
    """Generate change list entries as the backend sends them (camelCase keys)."""
    return {
        "id": draw(st.text(min_size=1, max_size=20)),
        "changeListVersion": draw(st.integers(min_value=0, max_value=2**31)),
        "isDelete": draw(st.booleans()),
    }


@given(change_list_payload_strategy())
def test_change_list_parses_backend_payload(payload: dict):
    """Backend camelCase keys map onto the snake_case fields unchanged."""
    change = NetworkChangeList.model_validate(payload)

    assert change.id == payload["id"]
    assert change.change_list_version == payload["changeListVersion"]
    assert change.is_delete == payload["isDelete"]
    assert change.model_dump(by_alias=True) == payload


@given(
    st.integers(min_value=0, max_value=10_000),
    st.integers(min_value=0, max_value=10_000),
    st.integers(min_value=0, max_value=10_000),
)
def test_versions_copy_touches_only_one_field(topic: int, news: int, new_topic: int):
    """Updating one cursor through model_copy leaves the other cursor and the original as is."""
    versions = ChangeListVersions(topic_version=topic, news_resource_version=news)

    updated = versions.model_copy(update={"topic_version": new_topic})

    assert updated.topic_version == new_topic
    assert updated.news_resource_version == news
    assert versions.topic_version == topic


def test_versions_are_frozen():
    versions = ChangeListVersions()

    with pytest.raises(ValidationError):
        versions.topic_version = 3


@given(st.integers(max_value=-1))
def test_negative_versions_rejected(version: int):
    with pytest.raises(ValidationError):
        ChangeListVersions(topic_version=version)


def test_change_list_defaults_to_update():
    change = NetworkChangeList(id="3", change_list_version=5)

    assert change.is_delete is False


def test_change_list_requires_id():
    with pytest.raises(ValidationError):
        NetworkChangeList(id="", change_list_version=1)


def test_entities_accept_both_key_styles():
    topic = Topic.model_validate({"id": "1", "shortDescription": "UI", "image_url": "x.svg"})
    news = NewsResource.model_validate(
        {"id": "n1", "headerImageUrl": None, "publishDate": "2022-08-04T23:00:00Z"}
    )

    assert topic.short_description == "UI"
    assert topic.image_url == "x.svg"
    assert news.publish_date.year == 2022
    assert news.topics == []


def test_run_report_success_and_failures():
    report = SyncRunReport(
        run_id="abc",
        state=SyncState.RETRY,
        results={"topics": True, "news_resources": False},
    )

    assert not report.success
    assert report.failed_entity_types == ["news_resources"]
    assert report.state.is_terminal
    assert not SyncState.RUNNING.is_terminal
