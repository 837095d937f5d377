"""
The logged-in user's own contact.
"""

from ..exceptions import NotLoggedInError, PuppetError
from ..filebox import FileBox
from .contact import Contact


class ContactSelf(Contact):
    """
    Contact of the logged-in user, with operations on the own profile.

    Every operation raises ``NotLoggedInError`` unless this contact is the
    logged-in user.
    """

    def _check_self(self) -> None:
        if not self.is_self():
            raise NotLoggedInError()

    async def _resync(self) -> None:
        try:
            await self.sync()
        except PuppetError as e:
            self.logger.error(f"Failed to sync {self.identity()} after update, reason: {e}")

    async def set_avatar(self, file: FileBox) -> None:
        self._check_self()
        await self.puppet.contact_avatar_set(self.id, file)
        await self._resync()

    async def set_name(self, name: str) -> None:
        self._check_self()
        await self.puppet.contact_self_name_set(name)
        await self._resync()

    async def set_signature(self, signature: str) -> None:
        self._check_self()
        await self.puppet.contact_self_signature_set(signature)
        await self._resync()

    async def qrcode(self) -> str:
        """QR code text others scan to add this user."""
        self._check_self()
        return await self.puppet.contact_self_qr_code()
