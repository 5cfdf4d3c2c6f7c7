SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INT AUTO_INCREMENT PRIMARY KEY,
        nome VARCHAR(150) NOT NULL,
        email VARCHAR(180) NOT NULL UNIQUE,
        senha_hash VARCHAR(255) NOT NULL,
        role VARCHAR(50) NOT NULL DEFAULT 'recepcao',
        ativo TINYINT(1) NOT NULL DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS roles (
        slug VARCHAR(50) PRIMARY KEY,
        nome VARCHAR(100) NOT NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS permissions (
        id INT AUTO_INCREMENT PRIMARY KEY,
        resource VARCHAR(60) NOT NULL,
        action VARCHAR(60) NOT NULL,
        UNIQUE KEY uk_permissions_resource_action (resource, action)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS role_permissions (
        role VARCHAR(50) NOT NULL,
        permission_id INT NOT NULL,
        PRIMARY KEY (role, permission_id),
        FOREIGN KEY (permission_id) REFERENCES permissions(id) ON DELETE CASCADE
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS access_logs (
        id INT AUTO_INCREMENT PRIMARY KEY,
        user_id INT NULL,
        user_email VARCHAR(180),
        ip_origem VARCHAR(64),
        user_agent VARCHAR(512),
        browser VARCHAR(60),
        status VARCHAR(20) NOT NULL DEFAULT 'SUCESSO',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        INDEX idx_access_logs_created (created_at),
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS terapias (
        id INT AUTO_INCREMENT PRIMARY KEY,
        nome VARCHAR(100) NOT NULL UNIQUE
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    # cpf_ativo vale 1 enquanto o paciente nao foi excluido e NULL depois,
    # de modo que o CPF so precisa ser unico entre os registros ativos.
    """
    CREATE TABLE IF NOT EXISTS pacientes (
        id INT AUTO_INCREMENT PRIMARY KEY,
        nome VARCHAR(150) NOT NULL,
        cpf CHAR(11) NOT NULL,
        data_nascimento DATE NULL,
        convenio VARCHAR(30) NOT NULL DEFAULT 'Particular',
        email VARCHAR(180),
        nome_responsavel VARCHAR(150),
        telefone VARCHAR(20),
        telefone2 VARCHAR(20),
        nome_mae VARCHAR(150),
        nome_pai VARCHAR(150),
        sexo VARCHAR(20),
        data_inicio DATE NULL,
        foto VARCHAR(512),
        laudo VARCHAR(512),
        documento VARCHAR(512),
        ativo TINYINT(1) NOT NULL DEFAULT 1,
        deleted_at DATETIME NULL,
        deleted_by_user_id INT NULL,
        cpf_ativo TINYINT AS (IF(deleted_at IS NULL, 1, NULL)) VIRTUAL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        UNIQUE KEY uk_pacientes_cpf_ativo (cpf, cpf_ativo),
        INDEX idx_pacientes_nome (nome)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS paciente_terapia (
        paciente_id INT NOT NULL,
        terapia_id INT NOT NULL,
        PRIMARY KEY (paciente_id, terapia_id),
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id) ON DELETE CASCADE,
        FOREIGN KEY (terapia_id) REFERENCES terapias(id) ON DELETE CASCADE
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS terapeutas (
        id INT AUTO_INCREMENT PRIMARY KEY,
        nome VARCHAR(150) NOT NULL,
        cpf CHAR(11) NOT NULL UNIQUE,
        data_nascimento DATE NULL,
        email VARCHAR(180),
        telefone VARCHAR(20),
        endereco VARCHAR(255),
        logradouro VARCHAR(150),
        numero VARCHAR(20),
        bairro VARCHAR(100),
        cidade VARCHAR(100),
        cep CHAR(8),
        especialidade VARCHAR(100) NOT NULL DEFAULT 'Nao informado',
        usuario_id INT NULL UNIQUE,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        FOREIGN KEY (usuario_id) REFERENCES users(id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS atendimentos (
        id INT AUTO_INCREMENT PRIMARY KEY,
        paciente_id INT NOT NULL,
        terapeuta_id INT NULL,
        data DATE NOT NULL,
        hora_inicio TIME NOT NULL,
        hora_fim TIME NOT NULL,
        turno VARCHAR(20) NOT NULL DEFAULT 'Matutino',
        periodo_inicio DATE NULL,
        periodo_fim DATE NULL,
        presenca VARCHAR(20) NOT NULL DEFAULT 'Nao informado',
        realizado TINYINT(1) NOT NULL DEFAULT 0,
        motivo VARCHAR(255),
        observacoes TEXT,
        status_repasse VARCHAR(30) NOT NULL DEFAULT 'Pendente',
        resumo_repasse TEXT,
        deleted_at DATETIME NULL,
        deleted_by_user_id INT NULL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        INDEX idx_atendimentos_paciente_data (paciente_id, data),
        INDEX idx_atendimentos_terapeuta_data (terapeuta_id, data),
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id),
        FOREIGN KEY (terapeuta_id) REFERENCES terapeutas(id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS anamnese (
        paciente_id INT PRIMARY KEY,
        payload JSON NOT NULL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS anamnese_versions (
        id INT AUTO_INCREMENT PRIMARY KEY,
        paciente_id INT NOT NULL,
        version INT NOT NULL,
        status VARCHAR(20) NOT NULL DEFAULT 'Rascunho',
        payload JSON NOT NULL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE KEY uk_anamnese_versions_paciente_version (paciente_id, version),
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS prontuario_documentos (
        id INT AUTO_INCREMENT PRIMARY KEY,
        paciente_id INT NOT NULL,
        tipo VARCHAR(40) NOT NULL,
        version INT NOT NULL,
        status VARCHAR(20) NOT NULL DEFAULT 'Rascunho',
        titulo VARCHAR(200),
        payload JSON NOT NULL,
        created_by_user_id INT NULL,
        created_by_role VARCHAR(50),
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        deleted_at DATETIME NULL,
        deleted_by_user_id INT NULL,
        UNIQUE KEY uk_prontuario_doc_versao (paciente_id, tipo, version),
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id),
        FOREIGN KEY (created_by_user_id) REFERENCES users(id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,

    """
    CREATE TABLE IF NOT EXISTS evolucoes (
        id INT AUTO_INCREMENT PRIMARY KEY,
        paciente_id INT NOT NULL,
        terapeuta_id INT NOT NULL,
        atendimento_id INT NULL,
        data DATE NOT NULL,
        payload JSON NOT NULL,
        deleted_at DATETIME NULL,
        deleted_by_user_id INT NULL,
        registro_ativo TINYINT AS (IF(deleted_at IS NULL, 1, NULL)) VIRTUAL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
        UNIQUE KEY uk_evolucoes_dia (paciente_id, terapeuta_id, data, registro_ativo),
        FOREIGN KEY (paciente_id) REFERENCES pacientes(id),
        FOREIGN KEY (terapeuta_id) REFERENCES terapeutas(id),
        FOREIGN KEY (atendimento_id) REFERENCES atendimentos(id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
    """,
]
