import argparse
import getpass
import json
import sys
from typing import List, Optional

from .config import Settings
from .controller import VaultController
from .utils import format_bytes


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='wpcloud')
    p.add_argument('--api-base')
    p.add_argument('--session', help='Session file path ("" keeps the session in memory)')
    p.add_argument(
        '--trust-object-key',
        action='store_true',
        help='Accept whatever object key the backend assigns to an upload. By default the key must be '
        '"<owner>/<file name>" or the upload is refused before any bytes are sent '
        '(WPCLOUD_VERIFY_OBJECT_KEY=0 also disables the check)',
    )
    sub = p.add_subparsers(dest='cmd', required=True)

    login = sub.add_parser('login')
    login.add_argument('email')
    login.add_argument('--password')

    register = sub.add_parser('register')
    register.add_argument('email')
    register.add_argument('--password')
    register.add_argument('--name')

    sub.add_parser('logout')
    sub.add_parser('whoami')

    ls = sub.add_parser('ls')
    ls.add_argument('--json', action='store_true')

    upload = sub.add_parser('upload')
    upload.add_argument('path')

    analyze = sub.add_parser('analyze')
    analyze.add_argument('key')
    analyze.add_argument('--json', action='store_true')

    return p


def _password(value: Optional[str]) -> str:
    if value is not None:
        return value
    return getpass.getpass('Password: ')


def _report(controller: VaultController, ok: bool) -> int:
    if not ok:
        print(f'Error: {controller.state.error}', file=sys.stderr)
        return 1
    if controller.state.info:
        print(controller.state.info)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.api_base:
        settings.api_base = args.api_base
    if args.session is not None:
        settings.session_path = args.session or None
    if args.trust_object_key:
        settings.verify_object_key = False

    controller = VaultController(settings)
    try:
        return _dispatch(args, controller)
    finally:
        controller.close()


def _dispatch(args: argparse.Namespace, controller: VaultController) -> int:
    state = controller.state

    if args.cmd == 'login':
        ok = controller.login(args.email, _password(args.password))
        if ok:
            print(f'OK: logged in as {state.owner_id}')
        return _report(controller, ok)

    if args.cmd == 'register':
        ok = controller.register(args.email, _password(args.password), args.name)
        return _report(controller, ok)

    if args.cmd == 'logout':
        ok = controller.logout()
        if ok:
            print('OK: logged out')
        return _report(controller, ok)

    if args.cmd == 'whoami':
        if state.session is None:
            print('Not logged in.', file=sys.stderr)
            return 1
        identity = state.session.identity
        print(f'{identity.owner_id}\t{identity.display_name or "-"}')
        return 0

    if args.cmd == 'ls':
        ok = controller.refresh()
        if ok:
            if args.json:
                print(json.dumps([
                    {
                        'key': item.key,
                        'size': item.size,
                        'last_modified': item.last_modified.isoformat() if item.last_modified else None,
                    }
                    for item in state.files
                ], indent=2))
            elif not state.files:
                print(f'No files for {state.owner_id} yet.')
            else:
                for item in state.files:
                    print(f"{format_bytes(item.size)}\t{item.key}")
        return _report(controller, ok)

    if args.cmd == 'upload':
        ok = controller.upload_path(args.path)
        return _report(controller, ok)

    if args.cmd == 'analyze':
        ok = controller.analyze(args.key)
        if ok:
            tags = list(state.selection.tags)
            if args.json:
                print(json.dumps({'key': args.key, 'tags': tags}, indent=2))
                return 0
            for tag in tags:
                print(tag)
        return _report(controller, ok)

    return 2


if __name__ == '__main__':
    raise SystemExit(main())
