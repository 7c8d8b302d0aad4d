"""
LearnPortal Assessment Engine

The engine behind a learning portal:
1. Exam assignment with derived pending/overdue tracking
2. Timed exam attempts with one active attempt per user and exam
3. Deterministic scoring across question types
4. Topic tagging of questions for filtering and analytics
5. Read-side statistics over attempts and assignments
"""

__version__ = "1.0.0"
