from __future__ import annotations

# v1 schema, kept in one place for readability.
SCHEMA_V1_SQL = """
CREATE TABLE directories (
    id INTEGER PRIMARY KEY,
    path TEXT
);

CREATE TABLE config_data (
    id INTEGER PRIMARY KEY,
    volume FLOAT
);

CREATE TABLE audio (
    id INTEGER PRIMARY KEY,
    data TEXT UNIQUE,
    display_name TEXT,
    title TEXT,
    artist TEXT,
    duration INTEGER,
    is_music BOOLEAN
);

CREATE INDEX idx_audio_display_name ON audio(display_name);

INSERT INTO config_data (volume) VALUES (0.7);
"""
