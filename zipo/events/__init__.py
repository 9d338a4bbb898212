"""Events, todos, invitations and notifications."""
