"""
Front-end route helpers used when building navigation links.
"""


class LessonRoutes:
    root = "/lesson"

    def for_level(self, course_id: str, unit_id: str, level_id: str) -> str:
        return f"{self.root}/{course_id}/{unit_id}/level/{level_id}"

    def for_quiz(self, course_id: str, unit_id: str, level_id: str) -> str:
        return f"{self.for_level(course_id, unit_id, level_id)}/quiz"


class DashboardRoutes:
    home = "/dashboard"
    courses = "/courses"
    leaderboard = "/leaderboard"
    profile = "/profile"


LESSON_ROUTES = LessonRoutes()
DASHBOARD_ROUTES = DashboardRoutes()
