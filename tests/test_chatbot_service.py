# tests/test_chatbot_service.py
"""
End-to-end answers from the chatbot service over a seeded database.

2025 data set:
    SOC Alerts       Alice x3 (Jan, completed), Bob x2 (Jan, pending)
    Threat Intel     Bob x1 (Feb, in-progress)
    Vulnerabilities  Carol x4 (Mar, completed)
plus two 2024 tasks for Alice.
"""

from datetime import date

import pytest

from services.chatbot_service import ChatbotService
from services.errors import ValidationError
from services.response_generator import HELP_MESSAGE, RANKING_HINT
from tests.conftest import add_tasks


@pytest.fixture
def chatbot(seeded_db):
    return ChatbotService(seeded_db, today=lambda: date(2025, 6, 1))


class TestRankings:

    def test_service_with_most_tasks(self, chatbot):
        result = chatbot.answer("What service has the most tasks in 2025?")
        assert result["response"] == 'The service with the most tasks in 2025 is "SOC Alerts" with 5 tasks.'

    def test_engineer_with_most_tasks(self, chatbot):
        result = chatbot.answer("Who did the most tasks?")
        assert result["response"] == "Carol completed the most tasks in 2025 with 4 tasks."

    def test_top_three_engineers(self, chatbot):
        result = chatbot.answer("top 3 engineers in 2025")
        assert result["response"] == (
            "Top 3 engineers in 2025:\n"
            "\n"
            "1. Carol: 4 tasks\n"
            "2. Alice: 3 tasks\n"
            "3. Bob: 3 tasks"
        )

    def test_top_services_defaults_to_five(self, chatbot):
        result = chatbot.answer("top services")
        lines = result["response"].split("\n")
        assert lines[0] == "Top 3 services in 2025:"
        assert lines[2:] == [
            "1. SOC Alerts: 5 tasks",
            "2. Vulnerabilities: 4 tasks",
            "3. Threat Intel: 1 task",
        ]

    def test_top_n_scoped_to_month(self, chatbot):
        result = chatbot.answer("top 1 engineers in January")
        assert result["response"] == "Top 1 engineer in January 2025:\n\n1. Alice: 3 tasks"

    def test_service_with_most_tasks_in_month(self, chatbot):
        result = chatbot.answer("What service has the most tasks in January 2025?")
        assert result["response"] == (
            'The service with the most tasks in January 2025 is "SOC Alerts" with 5 tasks.'
        )

    def test_engineer_with_least_tasks_in_month(self, chatbot):
        result = chatbot.answer("Which engineer has the least tasks in January 2025?")
        assert result["response"] == "Bob has the least tasks in January 2025 with 2 tasks."

    def test_oversized_top_n_is_clamped(self, chatbot):
        result = chatbot.answer("top 99999999999999999999 engineers")
        assert result["response"].split("\n") == [
            "Top 3 engineers in 2025:",
            "",
            "1. Carol: 4 tasks",
            "2. Alice: 3 tasks",
            "3. Bob: 3 tasks",
        ]

    def test_month_with_most_tasks(self, chatbot):
        result = chatbot.answer("Which month had the most tasks?")
        assert result["response"] == "The month with the most tasks in 2025 is January with 5 tasks."

    def test_least(self, chatbot):
        assert chatbot.answer("service with the least tasks")["response"] == (
            'The service with the least tasks in 2025 is "Threat Intel" with 1 task.'
        )
        assert chatbot.answer("which engineer has the lowest count")["response"] == (
            "Alice has the least tasks in 2025 with 3 tasks."
        )

    def test_empty_period(self, chatbot):
        result = chatbot.answer("who did the most tasks in 2019")
        assert result["response"] == "No tasks found in 2019."
        assert chatbot.answer("which month had the most tasks in 2019")["response"] == "No tasks found in 2019."

    def test_hint(self, chatbot):
        assert chatbot.answer("best one")["response"] == RANKING_HINT


class TestStatistics:

    def test_year_statistics(self, chatbot):
        result = chatbot.answer("Show me statistics for 2025")
        assert result["response"] == (
            "Statistics for 2025:\n"
            "\n"
            "Total Tasks: 10\n"
            "Services: 3\n"
            "Engineers: 3\n"
            "\n"
            "Status Breakdown:\n"
            "• completed: 7\n"
            "• in-progress: 1\n"
            "• pending: 2"
        )

    def test_month_statistics(self, chatbot):
        result = chatbot.answer("stats for January")
        assert result["response"].startswith("Statistics for January 2025:\n\nTotal Tasks: 5\n")


class TestWhoAndWhat:

    def test_who_worked_on_service_in_month(self, chatbot):
        result = chatbot.answer("Who worked on SOC Alerts in January 2025?")
        assert result["response"] == (
            'The following engineers worked on "SOC Alerts" in January 2025: Alice, Bob. Total: 5 tasks.'
        )

    def test_single_engineer(self, chatbot):
        result = chatbot.answer("Who worked on Vulnerabilities in March?")
        assert result["response"] == 'Carol worked on "Vulnerabilities" in March 2025 (4 tasks).'

    def test_who_needs_a_service(self, chatbot):
        result = chatbot.answer("who worked in January")
        assert result["response"] == "Please specify a service or month to find out who worked on it."

    def test_what_did_engineer_do(self, chatbot):
        result = chatbot.answer("What did Carol work on in 2025?")
        assert result["response"] == "Carol worked on 4 tasks in 2025 across 1 service: Vulnerabilities."

    def test_what_for_service_in_month(self, chatbot):
        result = chatbot.answer("what happened to Threat Intel in February")
        assert result["response"] == 'There was 1 task for "Threat Intel" in February 2025.'

    def test_what_without_criteria(self, chatbot):
        result = chatbot.answer("what is going on")
        assert result["response"] == "Please specify an engineer, service, or month to find tasks."


class TestCountListAverage:

    def test_count(self, chatbot):
        result = chatbot.answer("How many completed tasks in 2025?")
        assert result["response"] == "Found 7 tasks (year: 2025, status: completed)."
        assert result["count"] == 7

    def test_list_groups_rows(self, chatbot):
        result = chatbot.answer("List tasks for Bob")
        assert result["response"] == (
            "Found 3 tasks:\n"
            "\n"
            "• Bob - Threat Intel - February: 1 task (in-progress)\n"
            "• Bob - SOC Alerts - January: 2 tasks (pending)"
        )

    def test_average_per_engineer(self, db):
        add_tasks(db, "Xavier", "Patching", "June", 2023, count=10)
        add_tasks(db, "Yasmin", "Patching", "June", 2023, count=20)
        add_tasks(db, "Zoe", "Patching", "June", 2023, count=30)
        chatbot = ChatbotService(db)
        result = chatbot.answer("Average tasks per engineer in 2023")
        assert result["response"] == "The average number of tasks per engineer in 2023 is 20."

    def test_average_rounds_half_up(self, db):
        add_tasks(db, "Xavier", "Patching", "June", 2023, count=1)
        add_tasks(db, "Yasmin", "Patching", "June", 2023, count=2)
        result = ChatbotService(db).answer("avg per engineer 2023")
        assert result["response"].endswith("is 2.")

    def test_average_needs_a_dimension(self, chatbot):
        result = chatbot.answer("average please")
        assert result["response"] == "Please specify if you want average tasks per engineer or per service."


class TestFallback:

    def test_hello_counts_current_year(self, chatbot):
        result = chatbot.answer("hello")
        assert result["response"] == "Found 10 tasks matching your query."
        assert result["count"] == 10
        assert result["filters"] == {
            "month": None,
            "year": 2025,
            "engineer": None,
            "service": None,
            "status": None,
        }

    def test_help_when_nothing_recognized_or_found(self, seeded_db):
        chatbot = ChatbotService(seeded_db, today=lambda: date(2030, 1, 1))
        assert chatbot.answer("hello")["response"] == HELP_MESSAGE

    def test_no_match_with_criteria(self, chatbot):
        assert chatbot.answer("hello 2019")["response"] == "No tasks found matching your criteria."


class TestResponseShape:

    def test_tasks_are_truncated(self, seeded_db):
        chatbot = ChatbotService(seeded_db, max_tasks=2, today=lambda: date(2025, 6, 1))
        result = chatbot.answer("hello")
        assert len(result["tasks"]) == 2
        assert result["count"] == 10

    def test_idempotent(self, chatbot):
        assert chatbot.answer("top 3 engineers") == chatbot.answer("top 3 engineers")

    @pytest.mark.parametrize("query", [None, "", "   ", 42, ["hello"]])
    def test_query_is_required(self, chatbot, query):
        with pytest.raises(ValidationError) as exc:
            chatbot.answer(query)
        assert exc.value.message == "Query is required"
