import pytest

from subject_router.services.classifier import parse_classification

SUBJECTS = ["Invoices", "Handbook"]


@pytest.mark.parametrize("reply, expected", [
    ("Invoices", "Invoices"),
    ("invoices", "Invoices"),
    ("  HANDBOOK.\n", "Handbook"),
    ("`Invoices`", "Invoices"),
    ("\"Handbook\"", "Handbook"),
])
def test_known_subject_selected(reply, expected):
    assert parse_classification(reply, SUBJECTS) == expected


@pytest.mark.parametrize("reply", [
    "None",
    "none.",
    "NONE",
    "",
    "   ",
    "Payroll",
    "Invoices and Handbook",
    "I think it is Invoices",
])
def test_anything_else_is_unclassified(reply):
    assert parse_classification(reply, SUBJECTS) is None


def test_subject_named_like_sentinel_prefix_still_matches():
    assert parse_classification("Nonprofits", ["Nonprofits"]) == "Nonprofits"


def test_no_subjects_registered():
    assert parse_classification("Invoices", []) is None
