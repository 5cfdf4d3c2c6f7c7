import argparse

from clinica import create_app
from clinica.services import usuarios_service


def main():
    parser = argparse.ArgumentParser(description="Criar ou restaurar o usuario admin-geral.")
    parser.add_argument("--nome", default="Super Admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--senha", required=True)
    args = parser.parse_args()

    if len(args.senha) < 8:
        parser.error("a senha precisa ter ao menos 8 caracteres")

    app = create_app()
    with app.app_context():
        usuario_id = usuarios_service.garantir_superadmin(args.nome, args.email, args.senha)
        print(f"Superadmin garantido com ID {usuario_id}.")


if __name__ == "__main__":
    main()
