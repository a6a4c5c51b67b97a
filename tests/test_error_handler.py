"""
Tests for failure classification and retry decisions
"""

import asyncio
from sitemapper.error_handler import ErrorHandler, ErrorType, RetryConfig, describe_error
from sitemapper.errors import CrawlError, PersistenceError, StorageError


def test_classify_error():
    handler = ErrorHandler()

    assert handler.classify_error(asyncio.TimeoutError()) == ErrorType.NETWORK_TIMEOUT
    assert handler.classify_error(StorageError("disk full")) == ErrorType.STORAGE_ERROR
    assert handler.classify_error(CrawlError("HTTP 500")) == ErrorType.CRAWL_ERROR
    assert handler.classify_error(PersistenceError("db down")) == ErrorType.PERSISTENCE_ERROR
    assert handler.classify_error(KeyError('x')) == ErrorType.UNKNOWN_ERROR


def test_retry_until_last_attempt():
    handler = ErrorHandler(RetryConfig(max_attempts=3))

    assert handler.is_retryable(ErrorType.CRAWL_ERROR, 1)
    assert handler.is_retryable(ErrorType.UNKNOWN_ERROR, 2)
    assert not handler.is_retryable(ErrorType.CRAWL_ERROR, 3)
    assert not handler.is_retryable(ErrorType.PERSISTENCE_ERROR, 1)


def test_default_delay_is_fixed():
    handler = ErrorHandler()

    assert [handler.calculate_delay(attempt) for attempt in (1, 2, 3)] == [2.0, 2.0, 2.0]


def test_exponential_delay_is_capped():
    handler = ErrorHandler(RetryConfig(base_delay=1.0, exponential_base=2.0, max_delay=5.0))

    assert [handler.calculate_delay(attempt) for attempt in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]


def test_record_failure_keeps_bounded_history():
    handler = ErrorHandler(history_size=2)

    for attempt in (1, 2, 3):
        handler.record_failure('t1', 'https://ex.com/', CrawlError(f"failure {attempt}"), attempt)

    assert [info.message for info in handler.error_history] == ['failure 2', 'failure 3']
    summary = handler.get_error_summary()
    assert summary['total_errors'] == 2
    assert summary['failed_tasks'] == 1
    assert summary['error_types'] == {'crawl_error': 2}


def test_empty_summary():
    assert ErrorHandler().get_error_summary() == {'total_errors': 0}


def test_describe_error_falls_back_to_class_name():
    assert describe_error(CrawlError("HTTP 503")) == 'HTTP 503'
    assert describe_error(asyncio.TimeoutError()) == 'TimeoutError'
