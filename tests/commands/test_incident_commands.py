"""End-to-end tests of the incident commands through the dispatcher."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from incidentbot.chat.dispatcher import TriggerDispatcher
from incidentbot.engine.incident import IncidentStatus
from incidentbot.main import build_context, build_registry


@pytest_asyncio.fixture
async def dispatcher(context, registry):
    await context.topics.save("#ops", "Deploys ok | Status: Up | Please be nice")
    await context.topics.save("#status", "Public status")
    dispatcher = TriggerDispatcher()
    registry.install_into(dispatcher)
    return dispatcher


class TestStart:
    @pytest.mark.asyncio
    async def test_admin_starts_incident(self, dispatcher, context, client, public):
        consumed = await dispatcher.dispatch(public("!incident_start 4 website, rest API", sender="root"))

        assert consumed is True
        assert client.replies[-1] == ("#ops", "Incident saved: Website, REST api down (#1)")
        incident = await context.incidents.get(1)
        assert incident.components == ("Website", "REST api")
        assert ("#ops", "Deploys ok | Status: Website, REST api down (#1) | Please be nice") in client.topics
        assert ("#status", "Public status | Status: Website, REST api down (#1)") in client.topics

    @pytest.mark.asyncio
    async def test_unauthorized(self, dispatcher, context, client, public):
        consumed = await dispatcher.dispatch(public("!incident_start 4 Website"))

        assert consumed is False
        assert client.reply_texts() == ["You're not allowed to perform this action."]
        assert await context.incidents.list_open() == []

    @pytest.mark.asyncio
    async def test_channel_acl_grants_access(self, dispatcher, context, client, public):
        await context.acl.add("incident_start", "#ops")
        await dispatcher.dispatch(public("!incident_start 2 Other"))
        assert client.reply_texts()[-1] == "Incident saved: Other degraded (#1)"

    @pytest.mark.asyncio
    async def test_invalid_severity(self, dispatcher, context, client, public):
        await dispatcher.dispatch(public("!incident_start 9 Website", sender="root"))
        assert client.reply_texts() == ["Invalid parameters: Severity must be between 1 and 5, got 9"]
        assert await context.incidents.list_open() == []
        assert client.topics == []

    @pytest.mark.asyncio
    async def test_unknown_component(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_start 3 Website, Database", sender="root"))
        assert client.reply_texts() == ["Invalid parameters: Unknown component 'Database'"]

    @pytest.mark.asyncio
    async def test_severity_not_a_number(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_start high Website", sender="root"))
        texts = client.reply_texts()
        assert texts[0] == "Invalid <severity>: 'high' is not a number"
        assert texts[1] == "Start an incident. Format: !incident_start <severity> <components_comma_sep>"

    @pytest.mark.asyncio
    async def test_malformed(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_start", sender="root"))
        assert client.reply_texts()[0] == "The command is not properly formatted."

    @pytest.mark.asyncio
    async def test_not_available_in_private(self, dispatcher, client, privmsg):
        consumed = await dispatcher.dispatch(privmsg("!incident_start 4 Website", sender="root"))
        assert consumed is False
        assert client.replies == []

    @pytest.mark.asyncio
    async def test_topic_failure_reported_privately(self, dispatcher, client, public):
        client.failing_channels.add("#status")
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))

        assert client.sent == [
            ("root", "Could not update the topic of #status: not a channel operator on #status. Check my permissions please."),
        ]
        assert client.replies[-1] == ("#ops", "Incident saved: Website down (#1)")

    @pytest.mark.asyncio
    async def test_document_created_and_sent(self, config, client, session_factory, public):
        document = MagicMock()
        document.create_from_template = AsyncMock(return_value="doc-1")
        document.load_by_id = AsyncMock()
        document.id.return_value = "doc-1"
        document.url.return_value = "https://docs.example.org/doc-1"
        context = build_context(config, client, session_factory, document_factory=lambda: document)
        await context.topics.save("#ops", "ops")
        await context.topics.save("#status", "status")
        dispatcher = TriggerDispatcher()
        build_registry(context).install_into(dispatcher)

        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))

        assert ("root", "Incident document: https://docs.example.org/doc-1") in client.sent
        assert (await context.incidents.get(1)).document_id == "doc-1"
        assert ("#status", "status | Status: Website down (#1 - docs at https://docs.example.org/doc-1)") in client.topics


class TestUpdateAndClose:
    @pytest.mark.asyncio
    async def test_update_severity(self, dispatcher, context, client, public):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_update 1 severity 2", sender="root"))

        assert client.reply_texts()[-1] == "Incident updated: Website degraded (#1)"
        assert (await context.incidents.get(1)).severity == 2

    @pytest.mark.asyncio
    async def test_update_description(self, dispatcher, context, client, public):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_update 1 description CDN is down   ", sender="root"))
        assert (await context.incidents.get(1)).description == "CDN is down"

    @pytest.mark.asyncio
    async def test_update_bad_severity_value(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_update 1 severity bad", sender="root"))
        assert client.reply_texts()[-1] == "Invalid <value>: 'bad' is not a number"

    @pytest.mark.asyncio
    async def test_update_missing_incident(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_update 7 severity 2", sender="root"))
        assert client.reply_texts() == ["Incident #7 not found."]

    @pytest.mark.asyncio
    async def test_close_then_reopen(self, dispatcher, context, client, public):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_close 1", sender="root"))

        assert client.reply_texts()[-1] == "Incident closed: 1"
        assert (await context.incidents.get(1)).status == IncidentStatus.CLOSED
        assert client.topics[-2:] == [
            ("#ops", "Deploys ok | Status: Up | Please be nice"),
            ("#status", "Public status | Status: Up"),
        ]

        await dispatcher.dispatch(public("!incident_update 1 severity 5", sender="root"))
        assert client.reply_texts()[-2:] == [
            "Incident #1 was closed, reopening it.",
            "Incident updated: Website down (#1)",
        ]
        assert (await context.incidents.get(1)).is_open

    @pytest.mark.asyncio
    async def test_close_id_too_large(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_close 99999999999999999999999", sender="root"))
        assert client.reply_texts() == [
            "Invalid <id>: '99999999999999999999999' is out of range",
            "Closes an incident. Format: !incident_close <id>",
        ]

    @pytest.mark.asyncio
    async def test_close_twice(self, dispatcher, client, public):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_close 1", sender="root"))
        await dispatcher.dispatch(public("!incident_close 1", sender="root"))
        assert client.reply_texts()[-1] == "Incident #1 is already closed."


class TestQueries:
    @pytest.mark.asyncio
    async def test_no_open_incidents(self, dispatcher, client, privmsg):
        await dispatcher.dispatch(privmsg("!incidents", sender="root"))
        assert client.replies == [("root", "No open incidents. Status: Up")]

    @pytest.mark.asyncio
    async def test_lists_open_incidents(self, dispatcher, client, public, privmsg):
        await dispatcher.dispatch(public("!incident_start 4 Website", sender="root"))
        await dispatcher.dispatch(public("!incident_start 1 Thumbnails", sender="root"))
        client.replies.clear()

        await dispatcher.dispatch(privmsg("!incidents", sender="root"))
        assert client.reply_texts() == ["Website down (#1)", "Thumbnails degraded (#2)"]

    @pytest.mark.asyncio
    async def test_details(self, dispatcher, client, public, privmsg):
        await dispatcher.dispatch(public("!incident_start 3 Mobile apps", sender="root"))
        await dispatcher.dispatch(public("!incident_update 1 description Login broken", sender="root"))
        client.replies.clear()

        await dispatcher.dispatch(privmsg("!incident_details 1", sender="root"))
        texts = client.reply_texts()
        assert texts[0] == "Incident #1 (open), severity 3"
        assert texts[1] == "Components: Mobile apps"
        assert texts[-2:] == ["Description:", "Login broken"]
