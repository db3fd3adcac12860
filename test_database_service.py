#!/usr/bin/env python3
"""
Test script for the database service query surface.
Tests filters, ranges, ordering, constraint translation and transactions.
"""

import sys
from pathlib import Path
from datetime import datetime

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from services.database_service import (
    DatabaseService, TABLE_COLUMNS, initialize_database_for_testing, parse_date, parse_timestamp, rows_by
)
from services.errors import AlreadyExistsError, NotFoundError


def create_users(db, count=3):
    return [
        db.insert('users', {
            'email': f"user{i}@test.com",
            'password_hash': "hash",
            'full_name': f"User {i}",
            'created_at': datetime(2024, 1, i + 1),
        })
        for i in range(count)
    ]


def test_insert_and_select():
    print("Testing insert/select...")
    db = initialize_database_for_testing()
    users = create_users(db)

    assert all(u['id'] for u in users)
    assert db.count('users') == 3

    row = db.select_one('users', {'email': "user1@test.com"})
    assert row['full_name'] == "User 1"
    assert parse_timestamp(row['created_at']) == datetime(2024, 1, 2)
    assert db.select_one('users', {'email': "missing@test.com"}) is None

    print("[OK] Insert and select working")


def test_filters_ranges_and_ordering():
    print("Testing filters...")
    db = DatabaseService(":memory:")
    users = create_users(db, 4)
    ids = [u['id'] for u in users]

    assert len(db.select('users', {'id': ids[:2]})) == 2
    assert db.select('users', {'id': []}) == []
    assert len(db.select('users', {'last_login': None})) == 4

    ranged = db.select('users', gte={'created_at': datetime(2024, 1, 2)},
                       lte={'created_at': datetime(2024, 1, 3)}, order_by='created_at')
    assert [r['full_name'] for r in ranged] == ["User 1", "User 2"]

    newest = db.select('users', order_by='-created_at', limit=1)
    assert newest[0]['full_name'] == "User 3"

    indexed = rows_by(db.select('users'), 'email')
    assert set(indexed) == {f"user{i}@test.com" for i in range(4)}

    with pytest.raises(ValueError):
        db.select('users', {'password': "x"})
    with pytest.raises(ValueError):
        db.select('unknown_table')

    print("[OK] Filters, ranges and ordering working")


def test_update_and_delete():
    db = DatabaseService(":memory:")
    users = create_users(db)

    assert db.update('users', {'full_name': "Renamed"}, {'id': users[0]['id']}) == 1
    assert db.select_one('users', {'id': users[0]['id']})['full_name'] == "Renamed"
    assert db.update('users', {'full_name': "Nobody"}, {'id': "missing"}) == 0

    assert db.delete('users', {'id': [users[1]['id'], users[2]['id']]}) == 2
    assert db.count('users') == 1

    with pytest.raises(ValueError):
        db.update('users', {'full_name': "All"}, {})
    with pytest.raises(ValueError):
        db.delete('users', {})

    print("[OK] Update and delete working")


def test_unique_constraint_translated():
    db = DatabaseService(":memory:")
    create_users(db, 1)

    with pytest.raises(AlreadyExistsError):
        db.insert('users', {'email': "user0@test.com", 'password_hash': "hash"})

    print("[OK] Constraint violations raise AlreadyExistsError")


def test_transaction_rolls_back_on_error():
    print("Testing transactions...")
    db = DatabaseService(":memory:")

    with pytest.raises(NotFoundError):
        with db.transaction() as conn:
            db.insert('users', {'email': "ghost@test.com", 'password_hash': "hash"}, conn=conn)
            raise NotFoundError("abort")
    assert db.count('users') == 0

    with db.transaction() as conn:
        db.insert('users', {'email': "kept@test.com", 'password_hash': "hash"}, conn=conn)
        db.insert('users', {'email': "kept2@test.com", 'password_hash': "hash"}, conn=conn)
    assert db.count('users') == 2

    print("[OK] Transactions commit or roll back as a unit")


def test_file_database_and_stats(tmp_path):
    db = DatabaseService(str(tmp_path / "data" / "test.db"))
    create_users(db, 2)

    reopened = DatabaseService(str(tmp_path / "data" / "test.db"))
    stats = reopened.get_database_stats()
    assert set(stats) == set(TABLE_COLUMNS)
    assert stats['users'] == 2

    print("[OK] File database persists rows")


def test_parse_helpers():
    assert parse_timestamp(None) is None
    assert parse_timestamp("2024-10-14T08:30:00") == datetime(2024, 10, 14, 8, 30)
    assert parse_date("2024-10-14").isoformat() == "2024-10-14"
    assert parse_date(datetime(2024, 10, 14, 8, 30)).isoformat() == "2024-10-14"


if __name__ == "__main__":
    import tempfile
    try:
        test_insert_and_select()
        test_filters_ranges_and_ordering()
        test_update_and_delete()
        test_unique_constraint_translated()
        test_transaction_rolls_back_on_error()
        with tempfile.TemporaryDirectory() as tmp_dir:
            test_file_database_and_stats(Path(tmp_dir))
        test_parse_helpers()
        print("\n[SUCCESS] All database service tests passed!")
        sys.exit(0)
    except Exception as e:
        print(f"[ERROR] Database service test failed with error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
