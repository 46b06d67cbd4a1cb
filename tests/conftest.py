"""Shared fixtures for emr-copilot tests."""

from __future__ import annotations

import pytest

from emr_copilot.core.config import AppSettings, LLMConfig, OptionsStoreConfig
from emr_copilot.extraction.document import PageDocument
from emr_copilot.persistence.memory_backend import MemoryPersistenceBackend
from emr_copilot.persistence.options_store import OptionsStore

ENCOUNTER_URL = (
    "https://emr.example.org/openemr/interface/patient_file/encounter/"
    "encounter_top.php?pid=7&encounter=42"
)
FEE_SHEET_URL = (
    "https://emr.example.org/openemr/interface/patient_file/encounter/"
    "load_form.php?formname=fee_sheet&pid=7&encounter=42"
)

ENCOUNTER_HTML = """<html><head><title>OpenEMR</title></head><body>
<div class="patient-header">Patient: Jane Roe DOB: 1970-02-03</div>
<div id="demographics_ps_expand" class="demographic-summary">Sex: Female Age: 54</div>
<table class="encounter-info">
  <tr><td>Reason for Visit:</td><td>Persistent cough for 3 weeks</td></tr>
</table>
<div class="vitals-block">BP 142/88 HR 82 Temp 98.9</div>
<div class="medication-list">Lisinopril 10mg daily</div>
<div class="allergies">Penicillin</div>
<div id="problem_list">Hypertension (I10)</div>
<form>
  <textarea name="clinical_note">Patient reports productive cough, no fever.</textarea>
</form>
<script>var secret = "do not extract";</script>
</body></html>
"""

FEE_SHEET_HTML = """<html><head><title>OpenEMR Fee Sheet</title></head><body>
<table id="search"><tr><td>Search</td><td>New Patient</td></tr></table>
<h3>Selected Fee Sheet Codes and Charges for Current Encounter</h3>
<div class="grid">
<table id="billing">
  <tr><td>Type</td><td>Code</td><td>Description</td><td>Modifiers</td><td>Price</td>
      <td>Qty</td><td>Justify</td><td>Note Codes</td><td>Auth</td><td>Delete</td></tr>
  <tr><td>ICD10</td><td> e11.9 </td><td>Type 2 diabetes mellitus</td><td></td>
      <td><input name="fee[]" value="0.00"></td><td></td><td></td><td></td><td></td><td></td></tr>
</table>
</div>
<input type="hidden" name="pid" value="7">
</body></html>
"""

SOAP_FORM_HTML = """<html><head><title>OpenEMR SOAP</title></head><body>
<form>
  <textarea id="subjective"></textarea>
  <textarea name="soap_objective"></textarea>
  <textarea id="a_text"></textarea>
  <input type="text" name="plan" value="">
</form>
</body></html>
"""


@pytest.fixture
def settings() -> AppSettings:
    """Test settings: fixed key, in-memory options, no retry delay."""
    return AppSettings(
        llm=LLMConfig(api_key="test-key", model="anthropic/test-model", retry_max_delay=0.0),
        options=OptionsStoreConfig(backend="memory"),
    )


@pytest.fixture
def options_store() -> OptionsStore:
    return OptionsStore(MemoryPersistenceBackend())


@pytest.fixture
def encounter_page() -> PageDocument:
    return PageDocument(ENCOUNTER_HTML, url=ENCOUNTER_URL)


@pytest.fixture
def fee_sheet_page() -> PageDocument:
    return PageDocument(FEE_SHEET_HTML, url=FEE_SHEET_URL)


@pytest.fixture
def soap_form_page() -> PageDocument:
    return PageDocument(SOAP_FORM_HTML, url=ENCOUNTER_URL)
