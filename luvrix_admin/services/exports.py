from datetime import date


def active_emails(subscribers: list[dict]) -> list[str]:
    return [s["email"] for s in subscribers if s.get("status") == "active" and s.get("email")]


def subscribers_csv(subscribers: list[dict]) -> str:
    return "Email\n" + "\n".join(active_emails(subscribers))


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"subscribers-{today.isoformat()}.csv"
