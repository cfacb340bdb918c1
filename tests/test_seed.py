"""
Tests for the demo data seeder.
"""
from taskorbit.seed import DEMO_TASKS, DEMO_USERS, seed_demo_data


class TestSeedDemoData:

    def test_seeds_users_and_tasks(self, services):
        created = seed_demo_data(services)

        assert created == {"users": len(DEMO_USERS), "tasks": len(DEMO_TASKS)}
        admin = services.user_service.get_user_by_email("admin@taskorbit.com")
        assert admin.is_admin
        tasks, pagination = services.task_service.list_tasks(limit=100)
        assert pagination["total"] == len(DEMO_TASKS)

        infra = next(t for t in tasks if t.title == "Setup TaskOrbit Infrastructure")
        assert infra.status == "in_progress"
        assert infra.tags == ["infrastructure", "devops"]
        assert infra.estimated_hours == 8.0

        auth_task = next(t for t in tasks if t.title == "Implement User Authentication")
        assert auth_task.completed_at is not None
        assert auth_task.actual_hours == 5.5

    def test_is_idempotent(self, services):
        seed_demo_data(services)
        assert seed_demo_data(services) == {"users": 0, "tasks": 0}

    def test_demo_credentials_work(self, services):
        seed_demo_data(services)
        session = services.auth_service.login("john@example.com", "john123")
        assert session["user"]["name"] == "John Doe"
