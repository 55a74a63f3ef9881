"""
Tests for auth-wall detection.
"""

from pipeline.auth_wall import AuthState, AuthWallDetector, is_login_url, is_sign_in_title


class TestLoginUrl:
    """Resolved-URL login patterns."""

    def test_login_paths(self):
        assert is_login_url("https://www.linkedin.com/login?session_redirect=%2Fjobs")
        assert is_login_url("https://www.linkedin.com/authwall?trk=gf&sessionRedirect=x")
        assert is_login_url("https://www.linkedin.com/checkpoint/challenge/AgG1")

    def test_job_page_is_not_login(self):
        assert not is_login_url("https://www.linkedin.com/jobs/view/3812345678/")
        assert not is_login_url("")
        assert not is_login_url(None)


class TestSignInTitle:
    """Title heuristics."""

    def test_plain_sign_in_title(self):
        assert is_sign_in_title("LinkedIn Login, Sign in | LinkedIn")
        assert is_sign_in_title("Log In or Sign Up")

    def test_role_keyword_overrides(self):
        """A job title that happens to mention signing in is not a wall."""
        assert not is_sign_in_title("Sign in to apply: Senior Data Engineer")
        assert not is_sign_in_title("Login Systems Developer job at Acme")

    def test_empty_title(self):
        assert not is_sign_in_title("")
        assert not is_sign_in_title(None)


class TestAuthWallDetector:
    """Combined verdicts."""

    def setup_method(self):
        self.detector = AuthWallDetector()

    def test_login_redirect(self):
        verdict = self.detector.inspect(
            "https://www.linkedin.com/authwall?trk=x",
            "<html><head><title>Senior Engineer</title></head></html>",
        )
        assert verdict.state == AuthState.LOGIN_REDIRECT
        assert verdict.auth_required

    def test_ambiguous_sign_in_page(self):
        verdict = self.detector.inspect(
            "https://www.linkedin.com/jobs/view/1/",
            "<html><head><title>Sign In | LinkedIn</title></head><body></body></html>",
        )
        assert verdict.state == AuthState.AMBIGUOUS
        assert verdict.auth_required

    def test_authenticated_job_page(self):
        verdict = self.detector.inspect(
            "https://www.linkedin.com/jobs/view/1/",
            "<html><head><title>Acme hiring Data Analyst in Berlin | LinkedIn</title></head></html>",
        )
        assert verdict.state == AuthState.AUTHENTICATED
        assert not verdict.auth_required

    def test_missing_title(self):
        verdict = self.detector.inspect("https://www.linkedin.com/jobs/view/1/", "<html><body>x</body></html>")
        assert not verdict.auth_required
