# storage/schema.py
"""
Database schema definitions for the SecOps Task Tracker.

Tables:
  - users: Login accounts (admin, director, engineer)
  - engineers: Team members who own tasks
  - services: Categories of security-operations work
  - tasks: Work logged per engineer, service, week and month
  - notifications: In-app messages per user
  - reminder_settings: Schedule for the task-logging reminder
  - import_batches: Task ids created by each bulk import (for undo)
"""

import sqlite3


class Schema(object):
    """
    Database schema definitions.
    """

    # =====================================================
    # USERS TABLE
    # =====================================================

    USERS_TABLE = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email VARCHAR(255) NOT NULL UNIQUE,
        name VARCHAR(255) NOT NULL,
        password_hash VARCHAR(255),
        role VARCHAR(20) NOT NULL DEFAULT 'engineer',
        engineer_name VARCHAR(255),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # ENGINEERS TABLE
    # =====================================================

    ENGINEERS_TABLE = """
    CREATE TABLE IF NOT EXISTS engineers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(255) NOT NULL UNIQUE,
        color VARCHAR(20) NOT NULL DEFAULT '#3b82f6',
        tasks_total INTEGER NOT NULL DEFAULT 0,
        user_id INTEGER,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # SERVICES TABLE
    # =====================================================

    SERVICES_TABLE = """
    CREATE TABLE IF NOT EXISTS services (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(255) NOT NULL UNIQUE,
        category VARCHAR(20) NOT NULL DEFAULT 'primary',
        assigned_to VARCHAR(255),
        count INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # TASKS TABLE
    # =====================================================

    TASKS_TABLE = """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        service VARCHAR(255) NOT NULL,
        engineer VARCHAR(255) NOT NULL,
        week INTEGER NOT NULL,
        month VARCHAR(20) NOT NULL,
        year INTEGER NOT NULL,
        status VARCHAR(20) NOT NULL DEFAULT 'pending',
        priority VARCHAR(20) NOT NULL DEFAULT 'medium',
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # NOTIFICATIONS TABLE
    # =====================================================

    NOTIFICATIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        title VARCHAR(255) NOT NULL,
        message TEXT,
        read INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # REMINDER SETTINGS TABLE
    # =====================================================

    REMINDER_SETTINGS_TABLE = """
    CREATE TABLE IF NOT EXISTS reminder_settings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        enabled INTEGER NOT NULL DEFAULT 1,
        frequency VARCHAR(20) NOT NULL DEFAULT 'weekly',
        day_of_week INTEGER NOT NULL DEFAULT 0,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # IMPORT BATCHES TABLE
    # =====================================================

    IMPORT_BATCHES_TABLE = """
    CREATE TABLE IF NOT EXISTS import_batches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_by INTEGER,
        task_ids TEXT NOT NULL,
        undone INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """

    # =====================================================
    # INDEXES FOR PERFORMANCE
    # =====================================================

    INDEXES = [
        "CREATE INDEX IF NOT EXISTS idx_tasks_engineer ON tasks(engineer)",
        "CREATE INDEX IF NOT EXISTS idx_tasks_service ON tasks(service)",
        "CREATE INDEX IF NOT EXISTS idx_tasks_year_month ON tasks(year, month)",
        "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at)",
        "CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, read)",
    ]

    # =====================================================
    # ALL TABLES (for initialization)
    # =====================================================

    ALL_TABLES = [
        USERS_TABLE,
        ENGINEERS_TABLE,
        SERVICES_TABLE,
        TASKS_TABLE,
        NOTIFICATIONS_TABLE,
        REMINDER_SETTINGS_TABLE,
        IMPORT_BATCHES_TABLE,
    ]


def init_database(db_path):
    """
    Initialize SQLite database with all required tables.

    Args:
        db_path: Path to SQLite database file (or ":memory:")

    Returns:
        Connection object
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    cursor = conn.cursor()

    for table_sql in Schema.ALL_TABLES:
        cursor.execute(table_sql)

    for index_sql in Schema.INDEXES:
        cursor.execute(index_sql)

    conn.commit()
    return conn
