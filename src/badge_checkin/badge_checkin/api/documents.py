"""GraphQL documents understood by the check-in service.

Field selections must stay exactly as they are: the service schema is fixed
and the response decoders in ``queries.py`` read these fields by name.
"""

from ..core.constants import QUESTION_NAMES

_QUESTION_LIST = ", ".join(f'"{name}"' for name in QUESTION_NAMES)

USER_DATA_FRAGMENT = f"""
fragment UserData on User {{
	id
	name
	email
	applied
	accepted
	confirmed
	confirmationBranch
	application {{
		type
	}}
	confirmation {{
		type
	}}
	questions(names: [{_QUESTION_LIST}]) {{
		name
		value
		values
	}}
}}
"""

TAG_DATA_FRAGMENT = """
fragment TagData on TagState {
	tag {
		name
	}
	checked_in
	checkin_success
	last_successful_checkin {
		checked_in_date
		checked_in_by
	}
}
"""

USER_SEARCH = """
query UserSearch($text: String!, $n: Int!) {
	search_user_simple(search: $text, offset: 0, n: $n, filter: {
		confirmed: true,
		accepted: true
	}) {
		user {
			...UserData
		}
		tags {
			...TagData
		}
	}
}
""" + USER_DATA_FRAGMENT + TAG_DATA_FRAGMENT

USER_GET = """
query UserGet($id: ID!) {
	user(id: $id) {
		user {
			...UserData
		}
		tags {
			...TagData
		}
	}
}
""" + USER_DATA_FRAGMENT + TAG_DATA_FRAGMENT

TAGS_GET = """
query TagsGet($only_current: Boolean) {
	tags(only_current: $only_current) {
		name
	}
}
"""

CHECK_IN_TAG = """
mutation CheckInTag($id: ID!, $tag: String!, $checkin: Boolean!) {
	check_in(user: $id, tag: $tag, checkin: $checkin) {
		user {
			...UserData
		}
		tags {
			...TagData
		}
	}
}
""" + USER_DATA_FRAGMENT + TAG_DATA_FRAGMENT
