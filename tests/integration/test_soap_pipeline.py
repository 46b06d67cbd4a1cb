"""End-to-end SOAP note: multi-frame extraction, recovery, field write-back."""

from __future__ import annotations

from emr_copilot.extraction.document import PageDocument
from emr_copilot.generation.client import GenerationClient
from emr_copilot.messaging import CommandDispatcher
from emr_copilot.services.assistant_service import AssistantService
from emr_copilot.session import SessionContext
from tests.conftest import ENCOUNTER_URL, SOAP_FORM_HTML
from tests.fakes.fake_inference import FakeInferenceBackend

# Literal newline inside the subjective string exercises control-character recovery
SOAP_RESPONSE = (
    '```json\n{"soap_content": {"subjective": "Cough for 3 weeks.\nNo fever.", '
    '"objective": "BP 142/88, HR 82", "assessment": "Acute bronchitis", '
    '"plan": "Supportive care, return if worse"}}\n```'
)


class TestSoapPipeline:
    async def test_draft_and_insert(self, settings, options_store, encounter_page) -> None:
        backend = FakeInferenceBackend(default_content=SOAP_RESPONSE)
        client = GenerationClient(settings, backend=backend, options_store=options_store)
        service = AssistantService(client, options_store)
        session = SessionContext()

        menu_frame = PageDocument(
            "<nav>Calendar Messages</nav>", url=ENCOUNTER_URL, is_top_level=False
        )
        reply = await service.handle_turn(session, "Draft SOAP", [encounter_page, menu_frame])

        assert reply.ok, reply.message
        assert reply.soap.subjective == "Cough for 3 weeks.\nNo fever."
        prompt = backend.prompts[0]
        assert "PAGE TYPE: Encounter" in prompt
        assert backend.calls[0]["params"]["max_tokens"] == 4096

        form = PageDocument(SOAP_FORM_HTML, url=ENCOUNTER_URL)
        result = CommandDispatcher().dispatch(
            {"action": "insertData", "data": session.last_generated_result.model_dump(by_alias=True)},
            [form],
        )
        assert result == {"success": True}
        assert form.select_one("#subjective").get_text() == "Cough for 3 weeks.\nNo fever."
        assert form.select_one("#a_text").get_text() == "Acute bronchitis"
        assert form.select_one('input[name="plan"]')["value"] == "Supportive care, return if worse"
        assert len(form.events) == 8
