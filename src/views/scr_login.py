from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

import api.crud
from api.client import ApiError
from utils.messages import UserLoginMessage
from utils.state import InvalidTokenError
from utils.validation import LOGIN_RULES, validate_form, validate_registration
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal, SimpleDialogModal


class LoginScreen(BaseScreen):
    """
    Login and sign-up tabs, the base screen of the "login" mode.
    Posts UserLoginMessage once a session was started.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Name")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd"
                    )
                    yield Label("Confirm Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-confirm"
                    )
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_screen_resume(self):
        # back here after a logout
        for widget in self.query(Input):
            if widget.password:
                widget.value = ""
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key != "enter":
            return
        if self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        elif self.focused == self.query_one("#input-reg-confirm"):
            self.handle_registration_submit()

    def _mark_invalid(self, input_id: str) -> None:
        widget = self.query_one(input_id, Input)
        widget.add_class("-invalid")
        widget.focus()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value.strip()

        errors = validate_form({"email": email, "password": pwd}, LOGIN_RULES)
        if errors:
            field = next(iter(errors))
            self.notify(errors[field][0], severity="error")
            self._mark_invalid(
                "#input-login-email" if field == "email" else "#input-login-pwd"
            )
            return

        try:
            token = await api.crud.login(email, pwd)
            await self.app.state.start_session(token)
        except (ApiError, InvalidTokenError) as e:
            self.notify(str(e), severity="error")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            self._mark_invalid("#input-login-pwd")
            return

        self.notify(f"Hello {self.app.state.name or email}!")
        self.app.post_message(UserLoginMessage())

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        values = {
            "name": self.query_one("#input-reg-name", Input).value.strip(),
            "email": self.query_one("#input-reg-email", Input).value.strip(),
            "password": self.query_one("#input-reg-pwd", Input).value.strip(),
            "confirm": self.query_one("#input-reg-confirm", Input).value.strip(),
        }

        errors = validate_registration(values)
        if errors:
            field = next(iter(errors))
            self.notify(errors[field][0], severity="error")
            self._mark_invalid(
                {
                    "name": "#input-reg-name",
                    "email": "#input-reg-email",
                    "password": "#input-reg-pwd",
                }.get(field, "#input-reg-confirm")
            )
            return

        try:
            await api.crud.register(values["name"], values["email"], values["password"])
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        await self.app.push_screen_wait(
            SimpleDialogModal("Registration successful. You can log in now.")
        )

        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = values["email"]
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = values["password"]
        input_login_pwd.focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
