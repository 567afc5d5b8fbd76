from __future__ import annotations

import unittest

from jobly_data.core.aggregation import aggregate, aggregate_one
from jobly_data.core.entities import COMPANIES, USERS
from jobly_data.core.errors import NotFoundError


def _user_row(username: str, job_id):  # noqa: ANN001,ANN202
    return {
        "username": username,
        "firstName": username.upper(),
        "lastName": "L",
        "email": f"{username}@x.com",
        "isAdmin": False,
        "job_id": job_id,
    }


class AggregateTests(unittest.TestCase):
    def _aggregate_users(self, rows):  # noqa: ANN001,ANN202
        return aggregate(
            rows,
            "username",
            parent_fields=USERS.parent_fields,
            child_fields=USERS.relation.child_fields,
            children="jobs",
        )

    def test_groups_contiguous_rows(self) -> None:
        rows = [_user_row("a", 1), _user_row("a", 2), _user_row("b", None)]
        result = self._aggregate_users(rows)

        self.assertEqual([(r["username"], r["jobs"]) for r in result], [("a", [1, 2]), ("b", [])])
        self.assertNotIn("job_id", result[0])

    def test_child_lists_are_independent(self) -> None:
        rows = [_user_row("a", 1), _user_row("a", 2), _user_row("b", None), _user_row("c", 9)]
        result = self._aggregate_users(rows)

        result[1]["jobs"].append(99)
        result[2]["jobs"].clear()
        self.assertEqual(result[0]["jobs"], [1, 2])
        self.assertEqual(result[1]["jobs"], [99])
        self.assertIsNot(result[0]["jobs"], result[1]["jobs"])

    def test_empty_rows(self) -> None:
        self.assertEqual(self._aggregate_users([]), [])

    def test_parent_reappearing_after_gap_is_a_new_group(self) -> None:
        rows = [_user_row("a", 1), _user_row("b", 2), _user_row("a", 3)]
        result = self._aggregate_users(rows)
        self.assertEqual([r["jobs"] for r in result], [[1], [2], [3]])

    def test_dict_children(self) -> None:
        base = {
            "handle": "c1",
            "name": "C1",
            "description": "d",
            "numEmployees": 1,
            "logoUrl": None,
        }
        rows = [
            {**base, "job_id": 1, "job_title": "j1", "job_salary": 10, "job_equity": 0},
            {**base, "job_id": 2, "job_title": "j2", "job_salary": None, "job_equity": None},
        ]
        result = aggregate(
            rows,
            "handle",
            parent_fields=COMPANIES.parent_fields,
            child_fields=COMPANIES.relation.child_fields,
            children="jobs",
        )
        self.assertEqual(
            result[0]["jobs"],
            [
                {"id": 1, "title": "j1", "salary": 10, "equity": 0},
                {"id": 2, "title": "j2", "salary": None, "equity": None},
            ],
        )

    def test_explicit_presence_column(self) -> None:
        rows = [{"k": 1, "v": None, "p": 1}, {"k": 1, "v": "x", "p": None}]
        result = aggregate(rows, "k", parent_fields=["k"], child_fields="v", presence="p")
        self.assertEqual(result, [{"k": 1, "children": [None]}])


class AggregateOneTests(unittest.TestCase):
    def test_single_parent(self) -> None:
        record = aggregate_one(
            [_user_row("a", 4), _user_row("a", 7)],
            "username",
            parent_fields=USERS.parent_fields,
            child_fields="job_id",
            children="jobs",
        )
        self.assertEqual(record["jobs"], [4, 7])
        self.assertEqual(record["username"], "a")

    def test_parent_without_children(self) -> None:
        record = aggregate_one(
            [_user_row("a", None)],
            "username",
            parent_fields=USERS.parent_fields,
            child_fields="job_id",
            children="jobs",
        )
        self.assertEqual(record["jobs"], [])

    def test_no_rows_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            aggregate_one(
                [],
                "username",
                parent_fields=USERS.parent_fields,
                child_fields="job_id",
                not_found="No user: nope",
            )
        self.assertEqual(str(ctx.exception), "No user: nope")


if __name__ == "__main__":
    unittest.main()
