from locust import HttpUser, task, between


class BallKnowledgeUser(HttpUser):
    wait_time = between(1, 3)

    @task
    def health(self):
        self.client.get("/api/health/live")

    @task(3)
    def matches(self):
        self.client.get("/api/matches")

    @task(2)
    def leaderboard(self):
        self.client.get("/api/leaderboard")
