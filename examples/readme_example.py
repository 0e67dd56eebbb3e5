from dataclasses import dataclass, field

from cowmap import BorrowScope, CowMap, Form


@dataclass
class Template:
    subject: str
    recipients: list[str] = field(default_factory=list)


# Shared, read-mostly data owned by the caller.
TEMPLATES = {
    "welcome": Template("Welcome!", ["ops@example.com"]),
    "reset": Template("Password reset", ["security@example.com"]),
}


def build_outbox(scope: BorrowScope, extra_recipient: str) -> CowMap[str, Template]:
    """Borrow every template; copy only the one that needs changes."""
    outbox: CowMap[str, Template] = CowMap.with_capacity(len(TEMPLATES))
    for name, template in TEMPLATES.items():
        outbox.insert_borrowed_value(name, scope.lend(template))

    outbox.get_mut("welcome").recipients.append(extra_recipient)
    return outbox


if __name__ == "__main__":
    with BorrowScope("request") as scope:
        outbox = build_outbox(scope, "new-user@example.com")

        for name in outbox.keys():
            form = outbox.entry_form(name)
            print(f"{name}: {outbox.get(name)} ({form.name.lower()})")

        assert outbox.entry_form("reset") is Form.BORROWED
        print(f"clones made: {outbox.stats.clones}")

        view = outbox.borrow_fields()
        print(f"borrowed view: {view.forms()}")

    print(f"source untouched: {TEMPLATES['welcome'].recipients}")
