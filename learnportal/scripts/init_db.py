#!/usr/bin/env python3
"""
Database initialization script.

Creates the schema for the configured database and, with ``--seed``, adds
a small demo topic, exam and question set.
"""

import sys
import logging
import asyncio
import argparse

from learnportal.config import settings
from learnportal.container import build_sql_services
from learnportal.database.init_db import (
    close_database, create_schema, drop_schema, get_session_factory, initialize_database
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_demo_data() -> None:
    """Create one topic, one exam and three questions."""
    services = build_sql_services(get_session_factory())

    topic = await services.catalog.create_topic(
        "Python Basics", "Core syntax and built-in types", "beginner"
    )
    exam = await services.catalog.create_exam(
        title="Python Fundamentals",
        description="Short check of core Python knowledge",
        duration_minutes=15,
        passing_score_percentage=60,
        topic_id=topic.topic_id
    )
    questions = [
        ("Which keyword defines a function?", "single_choice", ["func", "def", "lambda", "fn"], 1, 2),
        ("Lists are mutable.", "true_false", ["True", "False"], 0, 1),
        ("Which of these is an immutable sequence?", "multiple_choice", ["list", "dict", "tuple", "set"], 2, 2),
    ]
    for text, question_type, options, correct_option, points in questions:
        question = await services.question_bank.create_question(
            text=text,
            question_type=question_type,
            exam_id=exam.exam_id,
            options=options,
            correct_option=correct_option,
            points=points
        )
        await services.topic_tagger.associate(question.question_id, topic.topic_id)

    logger.info(f"Seeded exam {exam.exam_id} with {len(questions)} questions")


async def async_main(args: argparse.Namespace) -> None:
    """Initialize the database."""
    try:
        engine = await initialize_database(
            database_url=args.database_url,
            echo=args.echo,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT
        )
        if args.reset:
            await drop_schema(engine)
        await create_schema(engine)
        if args.seed:
            await seed_demo_data()

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        sys.exit(1)
    finally:
        await close_database()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the LearnPortal database schema")
    parser.add_argument("--database-url", default=settings.DATABASE_URL)
    parser.add_argument("--echo", action="store_true", help="Echo SQL statements")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    parser.add_argument("--seed", action="store_true", help="Add demo data")
    return parser.parse_args()


if __name__ == "__main__":
    asyncio.run(async_main(parse_args()))
