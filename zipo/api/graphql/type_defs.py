"""GraphQL SDL for the public API."""

from ariadne import gql

type_defs = gql(
	"""
	scalar DateTime

	enum Role {
		Viewer
		Editor
		Admin
	}

	enum EventStatus {
		Today
		Upcoming
		Passed
	}

	enum LinkType {
		Shortened
		Combined
	}

	enum UploadPurpose {
		Profile_Photo
		Event_Backdrop
	}

	type User {
		id: ID!
		email: String!
		name: String
		photo: String
		isEmailVerified: Boolean!
		receiveNewsletter: Boolean!
		newNotifications: Int!
		createdAt: DateTime!
	}

	type UserSummary {
		id: ID!
		name: String
		email: String!
		photo: String
	}

	type Invitee {
		id: ID!
		name: String
		email: String!
		photo: String
		role: Role!
	}

	type InviteeRole {
		id: ID!
		role: Role!
	}

	type Todo {
		id: ID!
		title: String!
		note: String!
		isCompleted: Boolean!
	}

	type Event {
		id: ID!
		title: String!
		date: DateTime!
		reminderDate: DateTime!
		daysBtwnReminderAndEvent: Int!
		todoCount: Int!
		todos: [Todo!]!
		bgCover: String!
		invitedEmails: [String!]!
		inviteeRoles: [InviteeRole!]!
		invitees: [Invitee!]!
		owner: UserSummary
		inviteLinkId: String!
		isInviteLinkActive: Boolean!
		createdAt: DateTime!
	}

	type Notification {
		id: ID!
		owner: ID!
		initiator: UserSummary
		type: String!
		message: String!
		resourceType: String!
		resourceId: ID!
		isActionRequired: Boolean!
		actionType: String
		actionTaken: Boolean
		createdAt: DateTime!
		expiresAt: DateTime!
	}

	type PaginationInfo {
		nextCursor: String
		totalDocs: Int!
		docsRetrieved: Int!
		hasNextPage: Boolean!
	}

	type NotificationPage {
		data: [Notification!]!
		pagination: PaginationInfo!
	}

	type CombinedLinkItem {
		title: String
		id: String
		url: String!
	}

	type CombinedLink {
		links: [CombinedLinkItem!]!
		description: String
		title: String
	}

	type Link {
		id: ID!
		path: String!
		alternators: [String!]!
		type: LinkType!
		link: String
		combinedLink: CombinedLink
		createdAt: DateTime!
	}

	type UploadUrl {
		key: String!
		uploadUrl: String!
	}

	type BasicResponse {
		code: Int!
		success: Boolean!
		token: String
	}

	type AuthResponse {
		code: Int!
		success: Boolean!
		data: User
		token: String
	}

	type EventResponse {
		code: Int!
		success: Boolean!
		data: Event
	}

	type InviteeResponse {
		code: Int!
		success: Boolean!
		data: Invitee
	}

	type TodoResponse {
		code: Int!
		success: Boolean!
		data: Todo
	}

	type LinkResponse {
		code: Int!
		success: Boolean!
		data: Link
	}

	input TodoInput {
		title: String!
		note: String!
	}

	input EventInput {
		title: String!
		date: DateTime!
		daysBtwnReminderAndEvent: Int
		todos: [TodoInput!]
		bgCover: String!
		invitedEmails: [String!]
		inviteLinkId: String
	}

	input PaginationInput {
		limit: Int
		cursor: String
	}

	input CombinedLinkItemInput {
		title: String
		id: String
		url: String!
	}

	input CombinedLinkInput {
		links: [CombinedLinkItemInput!]!
		description: String
		title: String
	}

	type Query {
		user: User!
		user_getById(id: ID!): User!
		events(status: EventStatus): [Event!]!
		event_getById(id: ID!): Event!
		event_generateInviteLinkId: String!
		notifications(pagination: PaginationInput): NotificationPage!
		links: [Link!]!
		link_isCustomizable(path: String!): Boolean!
		getOriginalLink(path: String!): Link!
		file_getUploadUrl(purpose: UploadPurpose!, contentType: String!): UploadUrl!
	}

	type Mutation {
		auth_sendVerificationCode(email: String!): BasicResponse!
		auth_resendVerificationCode(token: String!): BasicResponse!
		auth_verifyEmail(token: String!, code: String!): BasicResponse!
		auth_register(token: String!, name: String!, password: String!): AuthResponse!
		auth_login(email: String!, password: String!): AuthResponse!
		auth_sendResetPasswordMail(email: String!): BasicResponse!
		auth_resendResetPasswordMail(token: String!): BasicResponse!
		auth_verifyResetPasswordCode(token: String!, code: String!): BasicResponse!
		auth_resetPassword(token: String!, password: String!): BasicResponse!

		event_create(input: EventInput!): EventResponse!
		event_delete(id: ID!): EventResponse!
		event_toggleInviteLink(id: ID!, isInviteLinkActive: Boolean!): EventResponse!
		event_inviteUsers(id: ID!, invitedEmails: [String!]!): EventResponse!
		event_acceptInvitation(id: ID!, viaNotification: Boolean): InviteeResponse!
		event_rejectInvitation(id: ID!, viaNotification: Boolean): EventResponse!
		event_removeInvitee(id: ID!, inviteeId: ID!): InviteeResponse!
		event_assignRoleToInvitee(id: ID!, inviteeId: ID!, role: Role!): InviteeResponse!
		event_addTodo(id: ID!, title: String!, note: String!): TodoResponse!
		event_editTodo(id: ID!, todoId: ID!, title: String!, note: String!): TodoResponse!
		event_deleteTodo(id: ID!, todoId: ID!): TodoResponse!
		event_duplicateTodo(id: ID!, todoId: ID!): TodoResponse!
		event_markTodo(id: ID!, todoId: ID!, isCompleted: Boolean!): TodoResponse!

		link_shorten(link: String!): LinkResponse!
		link_shortenCustom(path: String!, link: String!): LinkResponse!
		link_combineCustom(path: String!, combinedLink: CombinedLinkInput!): LinkResponse!
	}
	"""
)
