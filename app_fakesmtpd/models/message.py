from dataclasses import dataclass, field
from typing import Any, Dict, List

KEY_MESSAGE_ID = "message_id"
KEY_FROM = "from"
KEY_RECIPIENTS = "recipients"
KEY_BODY = "body"


@dataclass(frozen=True)
class Message:
    """SMTP 会话记录的邮件"""

    # 会话开始接收信封时分配的ID（UTC时间戳，纳秒精度）
    message_id: str

    # 原样保存的 MAIL FROM 行
    mail_from: str

    # 原样保存的 RCPT TO 行（保持顺序与重复）
    recipients: List[str] = field(default_factory=list)

    # 邮件头与正文的原始行（不含结束符 "."）
    body: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            KEY_MESSAGE_ID: self.message_id,
            KEY_FROM: self.mail_from,
            KEY_RECIPIENTS: list(self.recipients),
            KEY_BODY: list(self.body),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            message_id=str(data[KEY_MESSAGE_ID]),
            mail_from=data[KEY_FROM],
            recipients=list(data.get(KEY_RECIPIENTS) or []),
            body=list(data.get(KEY_BODY) or []),
        )
