import pytest

from trustnest.errors import ForbiddenError, NotFoundError, ValidationError
from trustnest.models.messaging import Conversation


class TestConversations:
    def test_pair_is_stored_once_lower_id_first(self, services, user, other_user):
        first = services.messaging.get_or_create_conversation(other_user.id, user.id)
        second = services.messaging.get_or_create_conversation(user.id, other_user.id)

        assert first.id == second.id
        assert first.user1_id == min(user.id, other_user.id)
        assert Conversation.query.count() == 1

    def test_invalid_partners(self, services, user):
        with pytest.raises(ValidationError):
            services.messaging.get_or_create_conversation(user.id, user.id)
        with pytest.raises(NotFoundError):
            services.messaging.get_or_create_conversation(user.id, 777)

    def test_list_with_unread_counts(self, services, user, other_user):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        services.messaging.send_message(other_user.id, conversation.id, 'Is the room still free?')

        listed = services.messaging.list_conversations(user.id)

        assert len(listed) == 1
        assert listed[0]['other_user_id'] == other_user.id
        assert listed[0]['unread_count'] == 1
        assert services.messaging.list_conversations(other_user.id)[0]['unread_count'] == 0


class TestMessages:
    def test_send_and_read(self, services, user, other_user):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        message = services.messaging.send_message(user.id, conversation.id, 'Hi <b>there</b>')

        assert message.content == 'Hi &lt;b&gt;there&lt;/b&gt;'
        assert conversation.last_message_at is not None

        with pytest.raises(ForbiddenError):
            services.messaging.mark_as_read(user.id, message.id)
        services.messaging.mark_as_read(other_user.id, message.id)
        assert message.is_read is True

    def test_messages_oldest_first(self, services, user, other_user):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        for text in ('one', 'two', 'three'):
            services.messaging.send_message(user.id, conversation.id, text)

        messages = services.messaging.get_messages(other_user.id, conversation.id, limit=2)

        assert [m.content for m in messages] == ['one', 'two']

    def test_outsiders_are_forbidden(self, services, user, other_user, make_user):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        outsider = make_user()

        with pytest.raises(ForbiddenError):
            services.messaging.send_message(outsider.id, conversation.id, 'Hello')
        with pytest.raises(ForbiddenError):
            services.messaging.get_messages(outsider.id, conversation.id)

    @pytest.mark.parametrize('content', ['', '   ', 'x' * 5001, None])
    def test_content_length(self, services, user, other_user, content):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        with pytest.raises(ValidationError):
            services.messaging.send_message(user.id, conversation.id, content)

    def test_limit_bounds(self, services, user, other_user):
        conversation = services.messaging.get_or_create_conversation(user.id, other_user.id)
        with pytest.raises(ValidationError):
            services.messaging.get_messages(user.id, conversation.id, limit=101)
