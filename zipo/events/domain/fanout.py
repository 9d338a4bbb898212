"""Notification templates and recipient fan-out."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from zipo.events.domain import models


@dataclass(frozen=True, slots=True)
class Template:
	type: models.NotificationType
	message: str
	resource_type: models.ResourceType = models.ResourceType.EVENT
	is_action_required: bool = False
	action_type: Optional[models.ActionType] = None
	action_taken: Optional[bool] = None


def fanout(
	hosts: Iterable[UUID],
	template: Template,
	*,
	initiator: UUID,
	resource_id: UUID,
) -> list[models.NotificationDraft]:
	"""One draft per distinct host, in host order."""
	return [
		models.NotificationDraft(
			owner=host,
			initiator=initiator,
			type=template.type,
			message=template.message,
			resource_type=template.resource_type,
			resource_id=resource_id,
			is_action_required=template.is_action_required,
			action_type=template.action_type,
			action_taken=template.action_taken,
		)
		for host in dict.fromkeys(hosts)
	]


def single(recipient: UUID, template: Template, *, initiator: UUID, resource_id: UUID) -> list[models.NotificationDraft]:
	return fanout([recipient], template, initiator=initiator, resource_id=resource_id)


def event_invite(title: str) -> Template:
	return Template(
		type=models.NotificationType.EVENT_INVITE,
		message=f"Invited you to an event. {title}",
		is_action_required=True,
		action_type=models.ActionType.ACCEPT_OR_DECLINE_INVITATION,
		action_taken=False,
	)


def event_deleted(title: str) -> Template:
	return Template(type=models.NotificationType.EVENT_DELETE, message=f"Deleted the event. {title}")


def invitation_accepted(name: Optional[str], title: str) -> Template:
	return Template(
		type=models.NotificationType.EVENT_INVITATION_ACCEPTED,
		message=f"{name or 'An invitee'} accepted your invitation to {title}",
	)


def invitation_rejected(name: Optional[str], title: str) -> Template:
	return Template(
		type=models.NotificationType.EVENT_INVITATION_REJECTED,
		message=f"{name or 'An invitee'} rejected your invitation to {title}",
	)


def invitee_removed(title: str) -> Template:
	return Template(type=models.NotificationType.INVITEE_REMOVAL, message=f"You were removed from the event: {title}")


def role_assigned(role: models.Role, title: str) -> Template:
	return Template(
		type=models.NotificationType.INVITEE_ROLE_ASSIGNED,
		message=f"{role.value} Role was assigned to you on the event: {title}",
	)


def todo_added(title: str) -> Template:
	return Template(type=models.NotificationType.TODO_ADDED, message=f"Added a Todo. {title}")


def todo_edited(title: str) -> Template:
	return Template(type=models.NotificationType.TODO_EDITED, message=f"Edited a Todo. {title}")


def todo_deleted(title: str) -> Template:
	return Template(type=models.NotificationType.TODO_DELETED, message=f"Deleted a Todo. {title}")


def todo_duplicated(title: str) -> Template:
	return Template(type=models.NotificationType.TODO_DUPLICATED, message=f"Duplicated a Todo. {title}")


def todo_marked(is_completed: bool, title: str) -> Template:
	if is_completed:
		return Template(type=models.NotificationType.TODO_COMPLETED, message=f"Completed a Todo. {title}")
	return Template(type=models.NotificationType.TODO_UNMARKED, message=f"Unmarked a Todo. {title}")


def invitation_email(*, event_title: str, inviter_name: Optional[str], date: datetime) -> tuple[str, str]:
	"""Subject and HTML body for the invitation email sent to pending addresses."""
	inviter = inviter_name or "An events app user"
	subject = f"You are invited to {event_title}"
	body = (
		f"Hi, {inviter} is inviting you to their event which will take place on "
		f"{date.strftime('%a %b %d %Y')}. Login to the events App to accept the invitation."
	)
	return subject, body
