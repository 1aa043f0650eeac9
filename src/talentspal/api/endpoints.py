from __future__ import annotations

from dataclasses import dataclass

from talentspal.config import get_settings


@dataclass(frozen=True, slots=True)
class AuthEndpoints:
    signup: str
    login: str
    logout: str
    me: str
    update_profile: str
    change_password: str
    upload_profile_image: str
    delete_profile_image: str
    forgot_password: str
    reset_password: str
    refresh: str


@dataclass(frozen=True, slots=True)
class CompanyEndpoints:
    base: str

    @property
    def list(self) -> str:
        return self.base

    def details(self, company_id: str) -> str:
        return f"{self.base}/{company_id}"


@dataclass(frozen=True, slots=True)
class ChallengeEndpoints:
    today: str
    submit: str
    streak: str
    history: str


@dataclass(frozen=True, slots=True)
class AchievementEndpoints:
    list: str
    progress: str


@dataclass(frozen=True, slots=True)
class AnalyticsEndpoints:
    student: str
    leaderboard: str
    leaderboard_position: str


@dataclass(frozen=True, slots=True)
class PracticeEndpoints:
    questions: str
    companies: str
    tags: str
    check_answer: str


@dataclass(frozen=True, slots=True)
class MetadataEndpoints:
    universities: str
    majors: str
    industries: str
    cities: str


@dataclass(frozen=True, slots=True)
class QuestionEndpoints:
    user_stats: str
    history: str
    leaderboard: str


@dataclass(frozen=True, slots=True)
class ApiEndpoints:
    """
    Central table of API URLs.

    Every URL is derived from one base (API_BASE_URL, e.g. http://localhost:5000/api).
    """

    base_url: str
    auth: AuthEndpoints
    companies: CompanyEndpoints
    challenges: ChallengeEndpoints
    achievements: AchievementEndpoints
    analytics: AnalyticsEndpoints
    practice: PracticeEndpoints
    metadata: MetadataEndpoints
    questions: QuestionEndpoints

    @classmethod
    def from_base(cls, base_url: str) -> ApiEndpoints:
        base = str(base_url).rstrip("/")
        a = f"{base}/auth"
        return cls(
            base_url=base,
            auth=AuthEndpoints(
                signup=f"{a}/signup",
                login=f"{a}/login",
                logout=f"{a}/logout",
                me=f"{a}/me",
                update_profile=f"{a}/update-profile",
                change_password=f"{a}/change-password",
                upload_profile_image=f"{a}/upload-profile-image",
                delete_profile_image=f"{a}/delete-profile-image",
                forgot_password=f"{a}/forgot-password",
                reset_password=f"{a}/reset-password",
                refresh=f"{a}/refresh",
            ),
            companies=CompanyEndpoints(base=f"{base}/companies"),
            challenges=ChallengeEndpoints(
                today=f"{base}/challenges/today",
                submit=f"{base}/challenges/submit",
                streak=f"{base}/challenges/streak",
                history=f"{base}/challenges/history",
            ),
            achievements=AchievementEndpoints(
                list=f"{base}/achievements",
                progress=f"{base}/achievements/progress",
            ),
            analytics=AnalyticsEndpoints(
                student=f"{base}/analytics/student",
                leaderboard=f"{base}/analytics/leaderboard",
                leaderboard_position=f"{base}/analytics/leaderboard/position",
            ),
            practice=PracticeEndpoints(
                questions=f"{base}/practice/questions",
                companies=f"{base}/practice/companies",
                tags=f"{base}/practice/tags",
                check_answer=f"{base}/practice/check-answer",
            ),
            metadata=MetadataEndpoints(
                universities=f"{base}/metadata/universities",
                majors=f"{base}/metadata/majors",
                industries=f"{base}/metadata/industries",
                cities=f"{base}/metadata/cities",
            ),
            questions=QuestionEndpoints(
                user_stats=f"{base}/questions/stats/user",
                history=f"{base}/questions/history",
                leaderboard=f"{base}/questions/leaderboard",
            ),
        )


def get_endpoints() -> ApiEndpoints:
    return ApiEndpoints.from_base(get_settings().api_base_url)


def get_headers(token: str | None = None) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers
