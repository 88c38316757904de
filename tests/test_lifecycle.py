"""
Tests for in-memory lifecycle transitions and key-case helpers.
Run: python -m pytest tests/test_lifecycle.py -v
"""
import unittest

from services.lifecycle import InvalidStateError, cancel_application, soft_delete_review, withdraw_user
from tests.fakes import make_application, make_review, make_user
from utils.case import camelize, snake_names


class TestSoftTransitions(unittest.TestCase):
    def test_cancel_application(self):
        app = make_application(make_user(), status="in_progress")
        before = app.updated_at
        cancel_application(app)
        self.assertEqual(app.status, "cancelled")
        self.assertGreaterEqual(app.updated_at, before)

    def test_soft_delete_review_terminal(self):
        review = make_review(make_user(), status="active")
        soft_delete_review(review)
        self.assertTrue(review.is_deleted)
        self.assertEqual(review.status, "deleted")

    def test_soft_delete_review_resubmit(self):
        review = make_review(make_user(), status="active")
        soft_delete_review(review, resubmit=True)
        self.assertTrue(review.is_deleted)
        self.assertEqual(review.status, "register")

    def test_withdraw_twice_rejected(self):
        user = make_user()
        withdraw_user(user)
        self.assertTrue(user.is_deleted)
        with self.assertRaises(InvalidStateError):
            withdraw_user(user)


class TestCaseHelpers(unittest.TestCase):
    def test_camelize_nested(self):
        data = {"phone_number": "010", "extra_info": {"cpu_model": "i7"}, "items": [{"unit_price": 1}]}
        self.assertEqual(
            camelize(data),
            {"phoneNumber": "010", "extraInfo": {"cpuModel": "i7"}, "items": [{"unitPrice": 1}]},
        )

    def test_camelize_shallow(self):
        data = {"extra_info": {"cpu_model": "i7"}}
        self.assertEqual(camelize(data, deep=False), {"extraInfo": {"cpu_model": "i7"}})

    def test_snake_names(self):
        self.assertEqual(snake_names(["phoneNumber", "os"]), ("phone_number", "os"))
