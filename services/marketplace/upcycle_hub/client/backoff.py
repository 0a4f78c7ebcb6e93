class RateLimitBackoff:
    """Exponential wait shown after a sign up rate limit: min(cap, base * 2**attempt)

    The attempt counter lives in memory only. It keeps growing across
    countdowns and is cleared by reset() on a successful sign up or when
    the form is closed.
    """

    def __init__(self, base_seconds: int = 30, cap_seconds: int = 300):
        self.base_seconds = base_seconds
        self.cap_seconds = cap_seconds
        self.attempt = 0

    def wait_for(self, attempt: int) -> int:
        return min(self.cap_seconds, self.base_seconds * 2 ** attempt)

    def next_wait(self) -> int:
        """Wait for the current attempt, then advance the counter"""
        wait = self.wait_for(self.attempt)
        self.attempt += 1
        return wait

    def reset(self) -> None:
        self.attempt = 0
