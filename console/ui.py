"""Terminal presentation for the ingest console: prompt style and page/report printing."""

from questionary import Style

from console.forms import StepForm
from ingest.engine import CommitReport

STYLE = Style(
    [
        ("qmark", "fg:ansiblue bold"),
        ("question", "bold"),
        ("answer", "fg:ansigreen"),
        ("pointer", "fg:ansiblue bold"),
        ("highlighted", "fg:ansiblue bold"),
        ("instruction", "fg:ansibrightblack italic"),
    ]
)


def print_page(form: StepForm, errors: list[str]) -> None:
    print(f"\n== {form.title} ==")
    if form.description:
        print(form.description)
    for note in form.notes:
        print(f"  · {note}")
    for error in errors:
        print(f"  ✗ {error}")


def print_report(report: CommitReport) -> None:
    for obj in report.committed:
        print(f'  ✓ "{obj.label}" (ID: {obj.id}) has been ingested -> {obj.location}')
    for failure in report.failures:
        print(f"  ✗ {failure.describe()}: {failure.message}")
    if report.ok:
        print("\nIngest complete.")
    else:
        print("\nIngest finished with errors; please notify the administrator.")
