"""
In-memory stand-in for the asyncpg pool.

Understands exactly the statements the services issue and mimics the parts
of asyncpg the app relies on: acquire(), transaction(), fetch/fetchrow/
fetchval/execute, unique and foreign-key violations, and rollback.
"""

import copy
import re
from typing import Any, Callable, Dict, List, Optional

import asyncpg

from services import addresses_service as addr_sql
from services import users_service as user_sql

USER_FIELDS = ("id", "name", "email")
UPDATE_ADDRESS_PATTERN = re.compile(
    r"^UPDATE addresses SET (?P<sets>.+) WHERE user_id = \$(?P<user>\d+) AND id = \$(?P<id>\d+) RETURNING "
)
ASSIGNMENT_PATTERN = re.compile(r"(\w+) = \$(\d+)")


class FakeTransaction:
    def __init__(self, db: "FakeDatabase"):
        self.db = db
        self._snapshot = None

    async def __aenter__(self):
        self._snapshot = self.db.snapshot()
        self.db.events.append("begin")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.db.restore(self._snapshot)
            self.db.events.append("rollback")
        else:
            self.db.events.append("commit")
        return False


class FakeConnection:
    def __init__(self, db: "FakeDatabase"):
        self.db = db

    def transaction(self):
        return FakeTransaction(self.db)

    async def fetch(self, query: str, *params):
        return self.db.run(query, params)

    async def fetchrow(self, query: str, *params):
        rows = self.db.run(query, params)
        return rows[0] if rows else None

    async def fetchval(self, query: str, *params):
        rows = self.db.run(query, params)
        if not rows:
            return None
        return next(iter(rows[0].values()))

    async def execute(self, query: str, *params):
        rows = self.db.run(query, params)
        return f"OK {len(rows)}"


class _Acquire:
    def __init__(self, db: "FakeDatabase"):
        self.db = db

    async def __aenter__(self):
        self.db.acquired += 1
        return FakeConnection(self.db)

    async def __aexit__(self, exc_type, exc, tb):
        self.db.released += 1
        return False


class FakeDatabase:
    """Pool-shaped fake holding the users and addresses tables in memory"""

    def __init__(self):
        self.users: Dict[int, Dict[str, Any]] = {}
        self.addresses: Dict[int, Dict[str, Any]] = {}
        self.next_user_id = 1
        self.next_address_id = 1
        self.statements: List[tuple] = []
        self.events: List[str] = []
        self.acquired = 0
        self.released = 0
        # hook(query, params) -> exception to raise, or None
        self.fail_on: Optional[Callable[[str, tuple], Optional[Exception]]] = None

    def acquire(self):
        return _Acquire(self)

    # state helpers

    def snapshot(self):
        return copy.deepcopy((self.users, self.addresses, self.next_user_id, self.next_address_id))

    def restore(self, snapshot):
        self.users, self.addresses, self.next_user_id, self.next_address_id = copy.deepcopy(snapshot)

    def add_user(self, name: str, email: str, password: str = "hashed") -> int:
        return self._insert_user(name, email, password)["id"]

    def add_address(self, user_id: int, **fields) -> int:
        values = {
            "address_line": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "US",
        }
        values.update(fields)
        return self._insert_address(user_id, values)["id"]

    # statement dispatch

    def run(self, query: str, params: tuple) -> List[Dict[str, Any]]:
        self.statements.append((query, params))
        if self.fail_on:
            error = self.fail_on(query, params)
            if error is not None:
                raise error

        if query == "SELECT 1":
            return [{"?column?": 1}]
        if query == user_sql.LIST_USERS_SQL:
            return [self._public(u) for _, u in sorted(self.users.items())]
        if query == user_sql.GET_USER_SQL:
            user = self.users.get(params[0])
            return [self._public(user)] if user else []
        if query == user_sql.INSERT_USER_SQL:
            return [self._public(self._insert_user(*params))]
        if query == user_sql.INSERT_USER_RETURNING_ID_SQL:
            return [{"id": self._insert_user(*params)["id"]}]
        if query == user_sql.UPDATE_USER_SQL:
            return self._update_user(*params)
        if query == user_sql.DELETE_USER_SQL:
            return self._delete_user(params[0])
        if query == user_sql.ADDRESS_COUNTS_SQL:
            return [
                dict(self._public(u), address_count=self._address_count(uid))
                for uid, u in sorted(self.users.items())
            ]
        if query == user_sql.USERS_WITHOUT_ADDRESSES_SQL:
            return [
                self._public(u) for uid, u in sorted(self.users.items())
                if self._address_count(uid) == 0
            ]
        if query == addr_sql.INSERT_ADDRESS_SQL:
            user_id, *values = params
            return [dict(self._insert_address(user_id, dict(zip(addr_sql.ADDRESS_FIELDS, values))))]
        if query == addr_sql.LIST_ADDRESSES_SQL:
            return [dict(a) for _, a in sorted(self.addresses.items()) if a["user_id"] == params[0]]
        if query == addr_sql.DELETE_ADDRESS_SQL:
            return self._delete_address(*params)

        match = UPDATE_ADDRESS_PATTERN.match(query)
        if match:
            return self._update_address(match, params)

        raise AssertionError(f"Unexpected query: {query}")

    # table operations

    @staticmethod
    def _public(user: Dict[str, Any]) -> Dict[str, Any]:
        return {field: user[field] for field in USER_FIELDS}

    def _address_count(self, user_id: int) -> int:
        return sum(1 for a in self.addresses.values() if a["user_id"] == user_id)

    def _check_email_free(self, email: str, exclude_id: Optional[int] = None):
        for uid, user in self.users.items():
            if user["email"] == email and uid != exclude_id:
                raise asyncpg.UniqueViolationError(
                    'duplicate key value violates unique constraint "users_email_key"'
                )

    def _insert_user(self, name, email, password):
        self._check_email_free(email)
        user = {"id": self.next_user_id, "name": name, "email": email, "password": password}
        self.users[user["id"]] = user
        self.next_user_id += 1
        return user

    def _update_user(self, name, email, user_id):
        user = self.users.get(user_id)
        if not user:
            return []
        self._check_email_free(email, exclude_id=user_id)
        user.update(name=name, email=email)
        return [self._public(user)]

    def _delete_user(self, user_id):
        if user_id not in self.users:
            return []
        if self._address_count(user_id):
            raise asyncpg.ForeignKeyViolationError(
                'update or delete on table "users" violates foreign key constraint'
            )
        return [self._public(self.users.pop(user_id))]

    def _insert_address(self, user_id, values):
        if user_id not in self.users:
            raise asyncpg.ForeignKeyViolationError(
                'insert or update on table "addresses" violates foreign key constraint'
            )
        address = {"id": self.next_address_id, "user_id": user_id}
        address.update(values)
        self.addresses[address["id"]] = address
        self.next_address_id += 1
        return address

    def _update_address(self, match, params):
        user_id = params[int(match.group("user")) - 1]
        address_id = params[int(match.group("id")) - 1]
        address = self.addresses.get(address_id)
        if not address or address["user_id"] != user_id:
            return []
        for column, position in ASSIGNMENT_PATTERN.findall(match.group("sets")):
            address[column] = params[int(position) - 1]
        return [dict(address)]

    def _delete_address(self, user_id, address_id):
        address = self.addresses.get(address_id)
        if not address or address["user_id"] != user_id:
            return []
        return [dict(self.addresses.pop(address_id))]
