"""Tests for the in-memory JobStore."""

from datetime import datetime, timedelta, timezone

from profile_extractor.jobs import JobStatus, JobStore


def test_create_job_starts_pending():
    store = JobStore()
    job = store.create_job(url="https://acme.com")

    assert job.status == JobStatus.pending
    assert len(job.job_id) == 12
    assert store.get_job(job.job_id) is job


def test_job_lifecycle_completed():
    store = JobStore()
    job = store.create_job(url="https://acme.com")

    store.mark_running(job.job_id)
    assert job.status == JobStatus.running
    assert job.finished_at is None

    store.mark_completed(job.job_id, None)
    assert job.status == JobStatus.completed
    assert job.finished_at is not None


def test_job_lifecycle_failed_records_error():
    store = JobStore()
    job = store.create_job(url="https://acme.com")
    store.mark_running(job.job_id)
    store.mark_failed(job.job_id, "Some error")

    assert job.status == JobStatus.failed
    assert job.error == "Some error"


def test_marking_unknown_job_is_noop():
    store = JobStore()
    store.mark_running("missing")
    store.mark_failed("missing", "boom")
    assert store.get_job("missing") is None


def test_has_active_job_by_url():
    store = JobStore()
    job = store.create_job(url="https://acme.com")

    assert store.has_active_job("https://acme.com") is job
    assert store.has_active_job("https://other.com") is None

    store.mark_running(job.job_id)
    assert store.has_active_job("https://acme.com") is job


def test_finished_job_is_not_active():
    store = JobStore()
    job = store.create_job(url="https://acme.com")
    store.mark_completed(job.job_id, None)

    assert store.has_active_job("https://acme.com") is None


def test_evicts_oldest_finished_jobs():
    store = JobStore(max_jobs=2)
    first = store.create_job(url="https://a.com")
    store.mark_completed(first.job_id, None)
    second = store.create_job(url="https://b.com")
    store.mark_failed(second.job_id, "x")
    # Make ordering explicit
    first.created_at = datetime.now(timezone.utc) - timedelta(minutes=5)

    third = store.create_job(url="https://c.com")

    assert store.get_job(first.job_id) is None
    assert store.get_job(second.job_id) is not None
    assert store.get_job(third.job_id) is not None


def test_active_jobs_are_never_evicted():
    store = JobStore(max_jobs=1)
    first = store.create_job(url="https://a.com")
    second = store.create_job(url="https://b.com")

    assert store.get_job(first.job_id) is not None
    assert store.get_job(second.job_id) is not None
