import pytest

from apps.shared.auth import verify_shared_token
from apps.shared.errors import AuthorizationError


@pytest.mark.parametrize("header,query", [
    (None, None),
    ("anything", None),
    (None, "anything"),
])
def test_open_access_without_token(header, query):
    assert verify_shared_token(None, header, query) is None
    assert verify_shared_token("", header, query) is None


@pytest.mark.parametrize("header,query", [
    ("s3cret", None),
    (None, "s3cret"),
    ("wrong", "s3cret"),
    ("s3cret", "wrong"),
])
def test_matching_header_or_query_passes(header, query):
    verify_shared_token("s3cret", header, query)


@pytest.mark.parametrize("header,query", [
    (None, None),
    ("wrong", None),
    (None, "wrong"),
    ("Bearer s3cret", None),
    ("s3cret ", None),
    ("S3CRET", "S3CRET"),
])
def test_mismatch_is_rejected(header, query):
    with pytest.raises(AuthorizationError):
        verify_shared_token("s3cret", header, query)


def test_non_ascii_tokens_compare():
    verify_shared_token("hemmelig-æøå", "hemmelig-æøå", None)

    with pytest.raises(AuthorizationError):
        verify_shared_token("hemmelig-æøå", "hemmelig-aoa", None)
