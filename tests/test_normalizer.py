import pytest

from gamma_mcp.api.schemas import GenerationRequest
from gamma_mcp.errors import RequestValidationError
from gamma_mcp.pipeline.normalizer import normalize_request, parse_request


def _payload(**params) -> dict:
    return normalize_request(parse_request(params)).to_payload()


def test_minimal_request_gets_defaults_and_nothing_else() -> None:
    payload = _payload(input_text="Quarterly review")

    assert payload == {
        "inputText": "Quarterly review",
        "format": "presentation",
        "textMode": "generate",
    }


def test_absent_optional_fields_are_not_sent_as_null() -> None:
    payload = _payload(
        input_text="topic",
        export_as=None,
        num_cards=None,
        theme_id="",
        folder_ids=[],
        additional_instructions=None,
    )

    assert set(payload) == {"inputText", "format", "textMode"}
    assert None not in payload.values()


def test_pass_through_fields_are_copied() -> None:
    payload = _payload(
        input_text="topic",
        format="document",
        text_mode="preserve",
        export_as="pdf",
        num_cards=12,
        additional_instructions="Add speaker notes",
        folder_ids=["f1", "f2"],
        card_split="inputTextBreaks",
        theme_id="linen",
    )

    assert payload["format"] == "document"
    assert payload["textMode"] == "preserve"
    assert payload["exportAs"] == "pdf"
    assert payload["numCards"] == 12
    assert payload["additionalInstructions"] == "Add speaker notes"
    assert payload["folderIds"] == ["f1", "f2"]
    assert payload["cardSplit"] == "inputTextBreaks"
    assert payload["themeId"] == "linen"


def test_modern_text_options_override_legacy_flat_fields() -> None:
    payload = _payload(
        input_text="topic",
        text_amount="short",
        tone="casual",
        audience="students",
        text_options={"amount": "extensive", "tone": "formal", "language": "de"},
    )

    assert payload["textOptions"] == {
        "amount": "extensive",
        "tone": "formal",
        "audience": "students",
        "language": "de",
    }


def test_legacy_text_amount_maps_to_current_amounts() -> None:
    assert _payload(input_text="t", text_amount="short")["textOptions"] == {"amount": "brief"}
    assert _payload(input_text="t", text_amount="long")["textOptions"] == {"amount": "detailed"}
    assert _payload(input_text="t", text_amount="medium")["textOptions"] == {"amount": "medium"}


def test_modern_image_options_override_legacy_flat_fields() -> None:
    payload = _payload(
        input_text="topic",
        image_model="legacy-model",
        image_style="sketch",
        image_options={"model": "dall-e-3", "source": "aiGenerated"},
    )

    assert payload["imageOptions"] == {
        "model": "dall-e-3",
        "style": "sketch",
        "source": "aiGenerated",
    }


def test_empty_option_groups_are_omitted() -> None:
    payload = _payload(input_text="topic", text_options={}, image_options={"style": ""})

    assert "textOptions" not in payload
    assert "imageOptions" not in payload


def test_camel_case_input_is_accepted() -> None:
    payload = _payload(
        inputText="topic",
        textMode="condense",
        numCards=5,
        textAmount="long",
        imageStyle="minimalist",
    )

    assert payload["textMode"] == "condense"
    assert payload["numCards"] == 5
    assert payload["textOptions"] == {"amount": "detailed"}
    assert payload["imageOptions"] == {"style": "minimalist"}


def test_card_options_pass_through_with_wire_names() -> None:
    payload = _payload(
        input_text="topic",
        card_options={
            "dimensions": "16x9",
            "headerFooter": {
                "bottomRight": {"type": "cardNumber"},
                "topLeft": {"type": "text", "value": "ACME"},
                "hideFromFirstCard": True,
            },
        },
    )

    assert payload["cardOptions"] == {
        "dimensions": "16x9",
        "headerFooter": {
            "topLeft": {"type": "text", "value": "ACME"},
            "bottomRight": {"type": "cardNumber"},
            "hideFromFirstCard": True,
        },
    }


@pytest.mark.parametrize("text_mode", ["summarize", "GENERATE", "rewrite"])
def test_unknown_text_mode_is_rejected(text_mode: str) -> None:
    with pytest.raises(RequestValidationError, match="text_mode|textMode"):
        parse_request({"input_text": "topic", "text_mode": text_mode})


def test_card_count_out_of_range_is_rejected() -> None:
    with pytest.raises(RequestValidationError):
        parse_request({"input_text": "topic", "num_cards": 76})


def test_parse_request_returns_model_instances_unchanged() -> None:
    request = GenerationRequest(input_text="topic")

    assert parse_request(request) is request


def test_normalize_does_not_mutate_request() -> None:
    request = GenerationRequest(input_text="topic", tone="calm", text_options={"tone": "bold"})

    normalize_request(request)

    assert request.tone == "calm"
    assert request.text_options is not None
    assert request.text_options.tone == "bold"
