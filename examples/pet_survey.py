#!/usr/bin/env python3
"""
Example script walking a multi-step form through a full fill session.

Builds a two-step pet survey, answers it, saves a draft, navigates the
wizard and submits to an async callback.
"""

import asyncio
import tempfile

from formflow import FormSession, RuntimeConfig, SchemaBuilder
from formflow.core import FormHooks, JsonFileDraftStore
from formflow.schemas import select_options
from formflow.utils import configure_logging
from formflow.validation import describe_rules


def build_schema():
    builder = SchemaBuilder("Pet survey", form_id="pet-survey")
    (
        builder.add_section("About you", section_id="about")
        .add_text_field("name", "Name", validation={"required": True, "minLength": 2})
        .add_email_field("email", "Email", validation={"required": True})
        .add_checkbox_field("hasPet", "Do you have a pet?")
    )
    (
        builder.add_section(
            "Your pet",
            section_id="pet",
            conditional={"field": "hasPet", "operator": "equals", "value": True},
        )
        .add_text_field("petName", "Pet name", validation={"required": True})
        .add_radio_field("species", "Species", select_options(["Cat", "Dog", "Other"]))
        .add_number_field("petAge", "Pet age", validation={"min": 0, "max": 40, "integer": True}, unit="years")
    )
    return builder.set_settings(multiStep=True, showProgress=True).build()


async def send_to_backend(data):
    await asyncio.sleep(0.1)
    print(f"📨 Backend received: {data}")


async def main():
    """Demonstrate drafts, conditional steps and submission."""
    configure_logging(level="INFO")

    schema = build_schema()
    for field in schema.fields:
        hints = "; ".join(describe_rules(field)) or "no rules"
        print(f"   {field.label}: {hints}")

    hooks = FormHooks(
        on_step_change=lambda e: print(f"➡️  Step {e.current_step + 1}/{e.total_steps}"),
        on_visibility_change=lambda e: print(f"👀 Shown: {e.shown} Hidden: {e.hidden}"),
    )

    with tempfile.TemporaryDirectory() as draft_dir:
        store = JsonFileDraftStore(draft_dir)
        config = RuntimeConfig.for_development()

        session = FormSession(schema, draft_store=store, on_submit=send_to_backend, config=config, hooks=hooks)
        session.set_answers({"name": "Ada", "email": "ada@example.com", "hasPet": True})
        session.save_draft()

        # A new session picks the draft back up
        session = FormSession(schema, draft_store=store, on_submit=send_to_backend, config=config, hooks=hooks)
        print(f"📝 Restored answers: {session.answers}")

        result = session.next_step()
        print(f"Navigation: {result.transition.value} (progress {session.navigator.progress:.0%})")

        session.set_answers({"petName": "Rex", "species": "dog", "petAge": 4.5})
        record = await session.submit()
        for error in record.validation_errors or []:
            print(f"❌ {error.field}: {error.message}")

        session.set_answer("petAge", 4)
        record = await session.submit()
        print(f"✅ Submission {record.status.value}: {record.to_document()}")


if __name__ == "__main__":
    asyncio.run(main())
