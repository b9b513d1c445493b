"""
Tests for notifications and conversations
"""
import pytest

from app.errors import NotFoundError, ValidationError
from app.middleware import Principal, TenantScope
from app.models import ConversationParticipant, Message
from app.services import conversations, notifications


def notify(scope, user_id, title='Load assigned'):
    return notifications.create_notification(scope, {
        'user_id': user_id,
        'type': 'assignment',
        'title': title,
        'message': 'Pickup tomorrow at 08:00',
    })


def as_user(scope, user):
    return TenantScope(Principal(company_id=scope.company_id, user_id=user.id))


class TestNotifications:
    """Test in-app notifications"""

    def test_user_sees_only_own(self, scope_a, company_a, make_user):
        other = make_user(company_a)
        notify(scope_a, scope_a.user_id)
        notify(scope_a, other.id)

        page, unread = notifications.list_notifications(scope_a)
        assert page.total == 1
        assert unread == 1
        assert page.items[0].user_id == scope_a.user_id

    def test_other_users_notification_not_found(self, scope_a, company_a, make_user):
        other = make_user(company_a)
        theirs = notify(scope_a, other.id)
        with pytest.raises(NotFoundError):
            notifications.mark_read(scope_a, theirs.id)

    def test_target_must_be_in_company(self, scope_a, scope_b):
        with pytest.raises(NotFoundError):
            notify(scope_a, scope_b.user_id)

    def test_type_validated(self, scope_a):
        with pytest.raises(ValidationError):
            notifications.create_notification(scope_a, {
                'user_id': scope_a.user_id, 'type': 'spam', 'title': 't', 'message': 'm',
            })

    def test_read_unread_cycle(self, scope_a):
        notification = notify(scope_a, scope_a.user_id)
        assert notifications.mark_read(scope_a, notification.id).read is True
        assert notifications.unread_count(scope_a) == 0
        assert notifications.mark_unread(scope_a, notification.id).read is False
        assert notifications.unread_count(scope_a) == 1

    def test_mark_all_read(self, scope_a):
        for i in range(3):
            notify(scope_a, scope_a.user_id, title=f'N{i}')
        assert notifications.mark_all_read(scope_a) == 3
        assert notifications.unread_count(scope_a) == 0

    def test_unread_only_listing(self, scope_a):
        first = notify(scope_a, scope_a.user_id)
        notify(scope_a, scope_a.user_id)
        notifications.mark_read(scope_a, first.id)

        page, unread = notifications.list_notifications(scope_a, unread_only=True)
        assert page.total == 1
        assert unread == 1

    def test_delete(self, scope_a):
        notification = notify(scope_a, scope_a.user_id)
        notifications.delete_notification(scope_a, notification.id)
        with pytest.raises(NotFoundError):
            notifications.get_notification(scope_a, notification.id)


class TestConversations:
    """Test conversations and messages"""

    def test_creator_is_participant(self, scope_a, company_a, make_user):
        other = make_user(company_a)
        conversation = conversations.create_conversation(scope_a, {'participant_ids': [other.id]})
        assert set(conversation.participant_ids()) == {scope_a.user_id, other.id}
        assert conversation.is_group is False

    def test_participants_must_be_in_company(self, scope_a, scope_b):
        with pytest.raises(NotFoundError):
            conversations.create_conversation(scope_a, {'participant_ids': [scope_b.user_id]})
        assert ConversationParticipant.query.count() == 0

    def test_needs_someone_to_talk_to(self, scope_a):
        with pytest.raises(ValidationError):
            conversations.create_conversation(scope_a, {'participant_ids': [scope_a.user_id]})

    def test_non_participant_cannot_see_it(self, scope_a, company_a, make_user):
        member = make_user(company_a)
        outsider = make_user(company_a)
        conversation = conversations.create_conversation(scope_a, {'participant_ids': [member.id]})

        with pytest.raises(NotFoundError):
            conversations.get_conversation(as_user(scope_a, outsider), conversation.id)
        with pytest.raises(NotFoundError):
            conversations.send_message(as_user(scope_a, outsider), conversation.id, {'content': 'hi'})
        assert conversations.list_conversations(as_user(scope_a, outsider)).total == 0

    def test_messages_and_unread(self, scope_a, company_a, make_user):
        member = make_user(company_a)
        conversation = conversations.create_conversation(scope_a, {'participant_ids': [member.id]})

        conversations.send_message(scope_a, conversation.id, {'content': 'Load LD-1 is ready'})
        conversations.send_message(scope_a, conversation.id, {'content': 'Dock 4'})

        member_scope = as_user(scope_a, member)
        assert conversations.unread_count(member_scope, conversation.id) == 2
        assert conversations.unread_count(scope_a, conversation.id) == 0
        assert conversations.list_messages(member_scope, conversation.id).total == 2

        conversations.mark_conversation_read(member_scope, conversation.id)
        assert conversations.unread_count(member_scope, conversation.id) == 0

    def test_empty_message_rejected(self, scope_a, company_a, make_user):
        member = make_user(company_a)
        conversation = conversations.create_conversation(scope_a, {'participant_ids': [member.id]})
        with pytest.raises(ValidationError):
            conversations.send_message(scope_a, conversation.id, {'content': '   '})
        assert Message.query.count() == 0

    def test_rename_and_delete(self, scope_a, company_a, make_user):
        members = [make_user(company_a).id, make_user(company_a).id]
        conversation = conversations.create_conversation(scope_a, {'participant_ids': members})
        assert conversation.is_group is True

        assert conversations.rename_conversation(scope_a, conversation.id, {'name': 'Night shift'}).name == 'Night shift'
        conversations.delete_conversation(scope_a, conversation.id)
        assert ConversationParticipant.query.count() == 0
