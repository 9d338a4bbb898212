from datetime import datetime, timezone
from uuid import uuid4

from zipo.events.domain import fanout, models


def test_fanout_creates_one_draft_per_distinct_host():
	first, second, actor, event_id = uuid4(), uuid4(), uuid4(), uuid4()

	drafts = fanout.fanout([first, second, first], fanout.todo_added("Snacks"), initiator=actor, resource_id=event_id)

	assert [draft.owner for draft in drafts] == [first, second]
	assert {draft.message for draft in drafts} == {"Added a Todo. Snacks"}
	assert all(draft.initiator == actor and draft.resource_id == event_id for draft in drafts)
	assert all(draft.type is models.NotificationType.TODO_ADDED for draft in drafts)


def test_fanout_with_no_hosts_is_empty():
	assert fanout.fanout([], fanout.event_deleted("Picnic"), initiator=uuid4(), resource_id=uuid4()) == []


def test_event_invite_requires_action():
	template = fanout.event_invite("Picnic")

	assert template.message == "Invited you to an event. Picnic"
	assert template.is_action_required is True
	assert template.action_type is models.ActionType.ACCEPT_OR_DECLINE_INVITATION
	assert template.action_taken is False


def test_targeted_templates():
	assert fanout.invitation_accepted("Ada", "Picnic").message == "Ada accepted your invitation to Picnic"
	assert fanout.invitation_rejected(None, "Picnic").message == "An invitee rejected your invitation to Picnic"
	assert fanout.invitee_removed("Picnic").message == "You were removed from the event: Picnic"
	assert fanout.role_assigned(models.Role.EDITOR, "Picnic").message == "Editor Role was assigned to you on the event: Picnic"


def test_todo_marked_uses_completion_state():
	assert fanout.todo_marked(True, "Tent").type is models.NotificationType.TODO_COMPLETED
	assert fanout.todo_marked(False, "Tent").type is models.NotificationType.TODO_UNMARKED


def test_single_targets_one_recipient():
	recipient = uuid4()

	drafts = fanout.single(recipient, fanout.invitee_removed("Picnic"), initiator=uuid4(), resource_id=uuid4())

	assert [draft.owner for draft in drafts] == [recipient]


def test_invitation_email_text():
	subject, body = fanout.invitation_email(
		event_title="Picnic",
		inviter_name=None,
		date=datetime(2024, 6, 10, tzinfo=timezone.utc),
	)

	assert subject == "You are invited to Picnic"
	assert "An events app user is inviting you" in body
	assert "Mon Jun 10 2024" in body
